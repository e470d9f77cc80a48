"""PubMed E-utilities client: relevance search plus article metadata."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

import httpx

from medtools.pipeline.core.config import (
    PUBMED_EFETCH_URL,
    PUBMED_ESEARCH_URL,
    PUBMED_MAX_AUTHORS,
    PUBMED_MAX_REDIRECTS,
    PUBMED_MAX_RESULTS,
    PUBMED_TIMEOUT_SECONDS,
    PUBMED_USER_AGENT,
)
from medtools.pipeline.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

SEARCH_FAILED_MESSAGE = "Failed to search medical literature database. Please try again later."


@dataclass
class PubMedArticle:
    pmid: str
    title: str
    authors: list[str] = field(default_factory=list)
    journal: str = ""
    year: str = ""
    abstract: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _text(node: Optional[ET.Element]) -> str:
    if node is None:
        return ""
    return "".join(node.itertext()).strip()


def parse_articles(xml_text: str) -> list[PubMedArticle]:
    """Parse an efetch ``PubmedArticleSet`` document."""
    root = ET.fromstring(xml_text)
    articles = []
    for item in root.iter("PubmedArticle"):
        citation = item.find("MedlineCitation")
        if citation is None:
            continue
        article = citation.find("Article")

        authors = []
        for author in article.findall("AuthorList/Author") if article is not None else []:
            name = _text(author.find("LastName")) or _text(author.find("CollectiveName"))
            initials = _text(author.find("Initials"))
            if name:
                authors.append(f"{name} {initials}".strip())
        if len(authors) > PUBMED_MAX_AUTHORS:
            authors = authors[:PUBMED_MAX_AUTHORS] + ["et al."]

        pub_date = article.find("Journal/JournalIssue/PubDate") if article is not None else None
        year = _text(pub_date.find("Year")) if pub_date is not None else ""
        if not year and pub_date is not None:
            year = _text(pub_date.find("MedlineDate"))

        abstract = "\n".join(
            _text(part) for part in (article.findall("Abstract/AbstractText") if article is not None else [])
        )

        articles.append(
            PubMedArticle(
                pmid=_text(citation.find("PMID")),
                title=_text(article.find("ArticleTitle")) if article is not None else "",
                authors=authors,
                journal=_text(article.find("Journal/Title")) if article is not None else "",
                year=year,
                abstract=abstract,
            )
        )
    return articles


class PubMedClient:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            max_redirects=PUBMED_MAX_REDIRECTS,
            timeout=PUBMED_TIMEOUT_SECONDS,
            headers={"User-Agent": PUBMED_USER_AGENT},
            transport=self._transport,
        )

    async def _get(self, client: httpx.AsyncClient, url: str, params: dict[str, Any]) -> httpx.Response:
        try:
            response = await client.get(url, params=params)
        except httpx.RequestError as e:
            raise ExternalServiceError(
                "PUBMED",
                "timeout" if isinstance(e, httpx.TimeoutException) else "unavailable",
                message=SEARCH_FAILED_MESSAGE,
                details={"reason": str(e)},
            ) from e
        if response.status_code != 200:
            raise ExternalServiceError(
                "PUBMED", "http", message=SEARCH_FAILED_MESSAGE, details={"http_code": response.status_code}
            )
        return response

    async def search(self, query: str, max_results: int = PUBMED_MAX_RESULTS) -> list[PubMedArticle]:
        """Return the most relevant articles for ``query`` (possibly none).

        Raises:
            ExternalServiceError: If PubMed cannot be queried
        """
        async with self._client() as client:
            response = await self._get(
                client,
                PUBMED_ESEARCH_URL,
                {
                    "db": "pubmed",
                    "term": query,
                    "retmax": max_results,
                    "retmode": "json",
                    "sort": "relevance",
                },
            )
            try:
                ids = response.json()["esearchresult"]["idlist"]
            except (ValueError, KeyError, TypeError) as e:
                raise ExternalServiceError("PUBMED", "response", message=SEARCH_FAILED_MESSAGE) from e

            if not ids:
                return []

            response = await self._get(
                client,
                PUBMED_EFETCH_URL,
                {"db": "pubmed", "id": ",".join(ids), "retmode": "xml"},
            )

        try:
            articles = parse_articles(response.text)
        except ET.ParseError as e:
            raise ExternalServiceError("PUBMED", "response", message=SEARCH_FAILED_MESSAGE) from e

        logger.info(f"PubMed returned {len(articles)} articles", extra={"service": "PUBMED"})
        return articles
