"""
Integration tests for the HTTP surface.

The app runs with a scripted chat-completions client installed on
``app.state`` before startup, so the lifespan keeps it instead of
connecting to a real endpoint.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from medtools.main import app
from medtools.pipeline.clients.pubmed_client import PubMedArticle
from medtools.pipeline.tools.registry import TEXT_MODELS

RADIOLOGY_REPLY = '{"pathologic": "yes", "severity": 7, "diagnostic": "Pneumonia"}'


@pytest.fixture
def llm(fake_llm):
    return fake_llm


@pytest.fixture
def client(llm):
    app.state.llm_client = llm.client()
    with TestClient(app) as test_client:
        yield test_client
    app.state.llm_client = None


class TestServiceEndpoints:
    def test_index_lists_tools(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "Radiology Report Analyzer" in response.text
        assert 'href="/soap"' in response.text

    def test_tools_listing(self, client):
        tools = {tool["name"]: tool for tool in client.get("/tools").json()}

        assert tools["rra"]["methods"] == ["POST"]
        assert tools["dpa"]["methods"] == ["GET", "POST"]

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_models_fall_back_to_builtin_catalog(self, client):
        """The scripted endpoint lists no model matching the default filter."""
        body = client.get("/models").json()

        assert body["models"] == TEXT_MODELS
        assert body["default_text_model"] == "qwen2.5:1.5b"

    def test_trace_id_echoed(self, client):
        response = client.get("/", headers={"X-Trace-ID": "abc-123"})

        assert response.headers["X-Trace-ID"] == "abc-123"

    def test_unknown_route_problem_detail(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "HTTP_404"
        assert body["instance"] == "/nope"
        assert body["trace_id"] == response.headers["X-Trace-ID"]

    def test_wrong_method_problem_detail(self, client):
        response = client.put("/rra")

        assert response.status_code == 405
        assert response.json()["code"] == "HTTP_405"
        assert "allow" in response.headers

    def test_missing_llm_client_problem_detail(self, client):
        saved = app.state.llm_client
        app.state.llm_client = None
        try:
            response = client.post("/rra", json={"report": "CT"})
        finally:
            app.state.llm_client = saved

        assert response.status_code == 503
        body = response.json()
        assert body["code"] == "LLM_CLIENT_UNAVAILABLE"
        assert body["retryable"] is True
        assert body["instance"] == "/rra"


class TestReportTools:
    def test_api_call_returns_json(self, client, llm):
        llm.replies = [RADIOLOGY_REPLY]

        response = client.post("/rra", json={"report": "CT: consolidation in RLL"})

        assert response.status_code == 200
        assert response.json() == json.loads(RADIOLOGY_REPLY)
        assert "set-cookie" not in response.headers

    def test_form_call_renders_html_and_sets_cookies(self, client, llm):
        llm.replies = [RADIOLOGY_REPLY]

        response = client.post("/rra", data={"report": "CT: consolidation", "submit": "1", "language": "en"})

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "7/10 Severe" in response.text
        cookies = response.headers.get_list("set-cookie")
        assert any(c.startswith("rra-language=en") for c in cookies)
        assert any(c.startswith("rra-model=") for c in cookies)

    def test_empty_report(self, client, llm):
        response = client.post("/rra", json={"report": "   "})

        assert response.status_code == 422
        assert response.json() == {"error": "The report cannot be empty."}
        assert llm.payloads == []

    def test_report_too_long(self, client):
        response = client.post("/rra", json={"report": "x" * 10001})

        assert response.json() == {"error": "The report is too long. Maximum 10000 characters allowed."}

    def test_out_of_range_model_output(self, client, llm):
        llm.replies = ['{"pathologic": "yes", "severity": 11, "diagnostic": "x"}']

        response = client.post("/rra", json={"report": "CT"})

        assert response.status_code == 502
        assert "severity" in response.json()["error"]

    def test_malformed_reply_shows_excerpt(self, client, llm):
        llm.replies = ["I am sorry, I cannot analyze this report today."]

        response = client.post("/dpa", json={"report": "Discharge paper"})

        assert response.status_code == 502
        assert response.json() == {
            "error": "Invalid JSON response from model "
            "(Content: I am sorry, I cannot analyze this report today....)"
        }

    def test_malformed_reply_logged_with_excerpt(self, client, llm, caplog):
        llm.replies = ["No JSON here."]

        with caplog.at_level("WARNING", logger="medtools.api.tool_endpoint"):
            client.post("/dpa", json={"report": "Discharge paper"})

        record = next(r for r in caplog.records if r.getMessage().startswith("Tool request failed"))
        assert record.details["excerpt"] == "No JSON here."
        assert record.error_code == "MALFORMED_RESPONSE"

    def test_model_timeout(self, client, llm):
        llm.replies = [httpx.ReadTimeout("timed out")]

        response = client.post("/rra", json={"report": "CT"})

        assert response.status_code == 504
        assert response.json()["error"].startswith("Connection error:")

    def test_get_without_processing_renders_form(self, client, llm):
        response = client.get("/rra", params={"report": "CT"})

        assert "<form" in response.text
        assert llm.payloads == []

    def test_get_with_input(self, client, llm):
        llm.replies = ['{"pathologic": "no", "severity": 0, "summary": "Normal.", "keywords": ["normal"]}']

        response = client.get("/dpa", params={"report": "Discharge paper"})

        assert response.json()["keywords"] == ["normal"]

    def test_cors_header(self, client, llm):
        llm.replies = [
            '{"diagnoses": [{"condition": "Pneumonia", "probability": 80, '
            '"description": "d", "supporting_features": ["consolidation"]}]}'
        ]

        response = client.post("/rdd", json={"report": "CT"})

        assert response.headers["access-control-allow-origin"] == "*"

    def test_unknown_model_uses_hard_default(self, client, llm):
        llm.replies = [RADIOLOGY_REPLY]

        client.post("/rra", json={"report": "CT", "model": "gpt-9"})

        assert llm.payloads[0]["model"] == "qwen2.5:1.5b"

    def test_model_cookie_respected(self, client, llm):
        llm.replies = [RADIOLOGY_REPLY]
        client.cookies.set("rra-model", "qwen3:1.7b")

        client.post("/rra", json={"report": "CT"})

        assert llm.payloads[0]["model"] == "qwen3:1.7b"

    def test_invalid_json_body(self, client):
        response = client.post("/rra", content=b"{not json", headers={"content-type": "application/json"})

        assert response.status_code == 422
        assert response.json() == {"error": "Invalid JSON request body."}


class TestWebTools:
    def test_summary(self, client, llm):
        llm.replies = ['{"title": "T", "summary": "S", "key_points": ["a", "b", "c"], "keywords": ["k"]}']

        with patch("medtools.services.analysis.fetch_page_text", AsyncMock(return_value="Page text")):
            response = client.post("/sum", json={"url": "https://example.org"})

        assert response.json()["key_points"] == ["a", "b", "c"]

    def test_wps_uses_summary_cookies(self, client, llm):
        llm.replies = ['{"title": "T", "summary": "S", "key_points": ["a", "b", "c"], "keywords": ["k"]}']

        with patch("medtools.services.analysis.fetch_page_text", AsyncMock(return_value="Page text")):
            response = client.post("/wps", data={"url": "https://example.org", "submit": "1"})

        cookies = response.headers.get_list("set-cookie")
        assert any(c.startswith("sum-language=ro") for c in cookies)

    def test_invalid_url(self, client):
        response = client.post("/scp", json={"url": "example.org"})

        assert response.status_code == 422
        assert response.json()["error"].startswith("Invalid URL format.")


class TestOcrEndpoint:
    def test_hupl_configuration(self, client):
        response = client.get("/ocr?hupl")

        assert response.text == "endpoint: http://testserver/ocr\n"
        assert response.headers["content-type"].startswith("text/plain")

    def test_json_result(self, client, llm, png_bytes):
        llm.replies = ["Ion Popescu, 54", '{"summary": "Patient name and age."}']

        response = client.post("/ocr", files={"image": ("scan.png", png_bytes, "image/png")})

        assert response.json() == {"text": "Ion Popescu, 54", "summary": "Patient name and age."}

    def test_plain_text_mode(self, client, llm, png_bytes):
        llm.replies = ["Ion Popescu, 54"]

        response = client.post(
            "/ocr", data={"file": "1"}, files={"image": ("scan.png", png_bytes, "image/png")}
        )

        assert response.text == "Ion Popescu, 54"
        assert len(llm.payloads) == 1

    def test_missing_image(self, client):
        response = client.post("/ocr", json={})

        assert response.json() == {"error": "Please upload an image file."}


class TestDocumentTools:
    def test_soap_upload_too_large(self, client):
        with patch("medtools.api.routes.documents.TRANSCRIPT_UPLOAD_MAX_BYTES", 10):
            response = client.post("/soap", files={"file": ("visit.txt", b"x" * 11, "text/plain")})

        assert response.status_code == 413
        assert response.json() == {"error": "The file is too large. Maximum 2MB allowed."}

    def test_sde_yaml_page(self, client, llm):
        llm.replies = ["```yaml\n{patient: Ion, age: 54}\n```"]

        response = client.post("/sde", data={"data": "Ion, 54", "output_format": "yaml", "submit": "1"})

        assert "<pre>patient: Ion\nage: 54\n</pre>" in response.text
        assert any(c.startswith("sde-output-format=yaml") for c in response.headers.get_list("set-cookie"))

    def test_stp_text_file(self, client, llm):
        llm.replies = ['{"pass1": "a", "pass2": "b", "pass3": "c"}']

        response = client.post("/stp", files={"file": ("paper.md", b"# Paper\nAbstract", "text/markdown")})

        assert response.json() == {"summary": {"pass1": "a", "pass2": "b", "pass3": "c"}}

    def test_exp_library_prompt(self, client, llm):
        llm.replies = ["Summary text"]

        response = client.post("/exp", json={"prompt": "", "prompt_type": "clinical_summary"})

        assert response.json() == {"result": "Summary text"}
        assert llm.payloads[0]["messages"][1]["content"].startswith("Summarize the following clinical text")


class TestLiteratureAndChat:
    def test_literature_search(self, client, llm):
        llm.replies = ['{"summary": "S", "key_findings": ["f"], "methodology": "RCT"}']
        pubmed = MagicMock()
        pubmed.search = AsyncMock(return_value=[PubMedArticle("1", "Title", ["A B"], "J", "2020", "Abs")])

        with patch("medtools.services.literature.PubMedClient", return_value=pubmed):
            response = client.post("/sml", json={"query": "aspirin"})

        assert response.json()["results"][0]["pmid"] == "1"

    def test_literature_no_results(self, client):
        pubmed = MagicMock()
        pubmed.search = AsyncMock(return_value=[])

        with patch("medtools.services.literature.PubMedClient", return_value=pubmed):
            response = client.post("/sml", json={"query": "zzzz"})

        assert response.status_code == 404
        assert response.json()["error"].startswith("No relevant articles found")

    def test_chat_json(self, client, llm):
        llm.replies = ["Rest and fluids."]
        history = [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello"}]

        response = client.post("/chat", json={"message": "I have a cold", "history": history})

        body = response.json()
        assert body["reply"] == "Rest and fluids."
        assert len(body["history"]) == 4
        assert body["personality"] == "medical_assistant"

    def test_chat_form_keeps_history(self, client, llm):
        llm.replies = ["Second answer"]
        history = json.dumps([{"role": "user", "content": "First"}, {"role": "assistant", "content": "One"}])

        response = client.post("/chat", data={"message": "Second", "history": history, "submit": "1"})

        assert "Second answer" in response.text
        assert 'name="history"' in response.text
        assert len(llm.payloads[0]["messages"]) == 4

    def test_chat_form_escapes_message_markup(self, client, llm):
        llm.replies = ["Noted."]

        response = client.post("/chat", data={"message": "<script>alert(1)</script>", "submit": "1"})

        assert response.status_code == 200
        assert "<script>alert(1)</script>" not in response.text
        assert "&lt;script&gt;" in response.text
