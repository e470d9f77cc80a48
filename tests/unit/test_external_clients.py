"""Unit tests for the web page fetcher and the PubMed client."""

import httpx
import pytest

from medtools.pipeline.clients.pubmed_client import (
    SEARCH_FAILED_MESSAGE,
    PubMedClient,
    parse_articles,
)
from medtools.pipeline.clients.web_client import (
    FETCH_FAILED_MESSAGE,
    INVALID_URL_MESSAGE,
    fetch_page_text,
    html_to_text,
    validate_url,
)
from medtools.pipeline.core.exceptions import ExternalServiceError, ValidationError

PAGE = """
<html><head><title>Ignored</title><style>body {color: red}</style></head>
<body>
  <script>var tracking = 1;</script>
  <h1>Hypertension</h1>
  <p>High blood   pressure is common.</p>
  <ul><li>Reduce salt</li><li>Exercise</li></ul>
</body></html>
"""

EFETCH_XML = """<?xml version="1.0"?>
<PubmedArticleSet>
  <PubmedArticle>
    <MedlineCitation>
      <PMID>111</PMID>
      <Article>
        <Journal>
          <JournalIssue><PubDate><Year>2021</Year></PubDate></JournalIssue>
          <Title>The Lancet</Title>
        </Journal>
        <ArticleTitle>Aspirin for <i>primary</i> prevention</ArticleTitle>
        <Abstract>
          <AbstractText>Background text.</AbstractText>
          <AbstractText>Results text.</AbstractText>
        </Abstract>
        <AuthorList>
          <Author><LastName>Smith</LastName><Initials>J</Initials></Author>
          <Author><LastName>Doe</LastName><Initials>A</Initials></Author>
          <Author><LastName>Roe</LastName><Initials>B</Initials></Author>
          <Author><LastName>Poe</LastName><Initials>C</Initials></Author>
          <Author><LastName>Lee</LastName><Initials>D</Initials></Author>
          <Author><CollectiveName>Trial Group</CollectiveName></Author>
        </AuthorList>
      </Article>
    </MedlineCitation>
  </PubmedArticle>
  <PubmedArticle>
    <MedlineCitation>
      <PMID>222</PMID>
      <Article>
        <Journal>
          <JournalIssue><PubDate><MedlineDate>2019 Jan-Feb</MedlineDate></PubDate></JournalIssue>
          <Title>BMJ</Title>
        </Journal>
        <ArticleTitle>Statins</ArticleTitle>
      </Article>
    </MedlineCitation>
  </PubmedArticle>
</PubmedArticleSet>
"""


class TestValidateUrl:
    def test_valid_url_trimmed(self):
        assert validate_url("  https://example.org/page ") == "https://example.org/page"

    @pytest.mark.parametrize("url", ["", "example.org", "ftp://example.org", "http://"])
    def test_invalid_url(self, url):
        with pytest.raises(ValidationError) as exc_info:
            validate_url(url)

        assert exc_info.value.message == INVALID_URL_MESSAGE


class TestHtmlToText:
    def test_markup_scripts_and_styles_removed(self):
        text = html_to_text(PAGE)

        assert text == "Hypertension\nHigh blood pressure is common.\nReduce salt\nExercise"

    def test_truncated(self):
        assert len(html_to_text("<p>" + "a" * 50 + "</p>", max_chars=10)) == 10


class TestFetchPageText:
    async def test_fetches_and_strips(self):
        seen = {}

        def handler(request):
            seen["ua"] = request.headers["User-Agent"]
            return httpx.Response(200, text=PAGE, headers={"content-type": "text/html; charset=utf-8"})

        text = await fetch_page_text("https://example.org", transport=httpx.MockTransport(handler))

        assert text.startswith("Hypertension")
        assert "Mozilla" in seen["ua"]

    async def test_follows_redirect(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"location": "https://example.org/new"})
            return httpx.Response(200, text="<p>Moved</p>", headers={"content-type": "text/html"})

        text = await fetch_page_text("https://example.org/old", transport=httpx.MockTransport(handler))

        assert text == "Moved"

    async def test_non_200(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404, text="gone"))

        with pytest.raises(ExternalServiceError) as exc_info:
            await fetch_page_text("https://example.org", transport=transport)

        assert exc_info.value.message == FETCH_FAILED_MESSAGE
        assert exc_info.value.error_code == "WEB_HTTP"

    async def test_timeout(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out")

        with pytest.raises(ExternalServiceError) as exc_info:
            await fetch_page_text("https://example.org", transport=httpx.MockTransport(handler))

        assert exc_info.value.http_status == 504

    async def test_empty_page(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, text="<script>x()</script>", headers={"content-type": "text/html"})
        )

        with pytest.raises(ExternalServiceError) as exc_info:
            await fetch_page_text("https://example.org", transport=transport)

        assert exc_info.value.error_type == "empty"


class TestParseArticles:
    def test_fields(self):
        first, second = parse_articles(EFETCH_XML)

        assert first.pmid == "111"
        assert first.title == "Aspirin for primary prevention"
        assert first.journal == "The Lancet"
        assert first.year == "2021"
        assert first.abstract == "Background text.\nResults text."

    def test_author_list_capped(self):
        first, _ = parse_articles(EFETCH_XML)

        assert first.authors == ["Smith J", "Doe A", "Roe B", "Poe C", "Lee D", "et al."]

    def test_medline_date_fallback(self):
        _, second = parse_articles(EFETCH_XML)

        assert second.year == "2019 Jan-Feb"
        assert second.authors == []
        assert second.abstract == ""


class TestPubMedClient:
    async def test_search_then_fetch(self):
        calls = []

        def handler(request):
            calls.append(request.url)
            if "esearch" in request.url.path:
                return httpx.Response(200, json={"esearchresult": {"idlist": ["111", "222"]}})
            return httpx.Response(200, text=EFETCH_XML)

        articles = await PubMedClient(transport=httpx.MockTransport(handler)).search("aspirin")

        assert [a.pmid for a in articles] == ["111", "222"]
        assert calls[0].params["sort"] == "relevance"
        assert calls[0].params["retmax"] == "5"
        assert calls[1].params["id"] == "111,222"

    async def test_no_ids(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"esearchresult": {"idlist": []}})
        )

        assert await PubMedClient(transport=transport).search("zzzz") == []

    async def test_service_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))

        with pytest.raises(ExternalServiceError) as exc_info:
            await PubMedClient(transport=transport).search("aspirin")

        assert exc_info.value.message == SEARCH_FAILED_MESSAGE
