"""Unit tests for HTML rendering and upload reading."""

import io

import pytest
from starlette.datastructures import UploadFile

from medtools.api.file_validation import read_upload
from medtools.api.presenters import (
    format_file_size,
    render_index,
    render_result,
    render_tool_page,
    severity_color,
    severity_label,
)
from medtools.pipeline.core.exceptions import PayloadTooLargeError, ValidationError
from medtools.pipeline.runner import resolve_context
from medtools.pipeline.tools.prompt_library import load_prompts, prompt_label
from medtools.pipeline.tools.registry import TEXT_MODELS, TOOLS, get_tool


class TestSeverity:
    @pytest.mark.parametrize(
        "severity,color,label",
        [
            (0, "#10b981", "Normal"),
            (3, "#3b82f6", "Minor"),
            (6, "#f59e0b", "Moderate"),
            (8, "#ef4444", "Severe"),
            (10, "#ef4444", "Critic"),
        ],
    )
    def test_bands(self, severity, color, label):
        assert severity_color(severity) == color
        assert severity_label(severity) == label


class TestRendering:
    def test_file_size(self):
        assert format_file_size(512) == "512 B"
        assert format_file_size(1536) == "1.5 KB"
        assert format_file_size(3 * 1024 * 1024) == "3.0 MB"

    def test_index(self):
        page = render_index(TOOLS)

        assert page.count("<li>") == len(TOOLS)

    def test_input_is_escaped(self):
        ctx = resolve_context(get_tool("pec"), {}, {}, TEXT_MODELS, "gemma3:1b")

        page = render_tool_page(ctx, {"content": "<script>alert(1)</script>"})

        assert "<script>alert(1)</script>" not in page
        assert "&lt;script&gt;" in page

    def test_error_shown(self):
        ctx = resolve_context(get_tool("rra"), {}, {}, TEXT_MODELS, "gemma3:1b")

        page = render_tool_page(ctx, {}, error="The report cannot be empty.")

        assert '<div class="error">The report cannot be empty.</div>' in page

    def test_upload_form_is_multipart(self):
        ctx = resolve_context(get_tool("ocr"), {}, {}, TEXT_MODELS, "gemma3:1b")

        assert 'enctype="multipart/form-data"' in render_tool_page(ctx, {})

    def test_markdown_result(self):
        html = render_result(get_tool("pec"), {"education": "# Asthma\n\n- inhaler"})

        assert "<h1>Asthma</h1>" in html
        assert "<li>inhaler</li>" in html

    def test_markdown_raw_html_is_escaped(self):
        html = render_result(get_tool("pec"), {"education": "Rest.\n\n<script>alert(1)</script>"})

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_chat_history_is_escaped(self):
        result = {
            "reply": "Hello",
            "history": [
                {"role": "user", "content": "<img src=x onerror=alert(1)>"},
                {"role": "assistant", "content": "Hello"},
            ],
        }

        html = render_result(get_tool("chat"), result)

        assert "<img" not in html

    def test_structured_result(self):
        html = render_result(
            get_tool("dpa"),
            {"pathologic": "no", "severity": 0, "summary": "Normal", "keywords": ["normal"]},
        )

        assert "0/10 Normal" in html
        assert "<dt>Keywords</dt>" in html


class TestPromptLibrary:
    def test_label(self):
        assert prompt_label("icd10_coding") == "Icd10 Coding"
        assert prompt_label("lab-results") == "Lab Results"

    def test_loads_supported_files(self, tmp_path):
        (tmp_path / "b_prompt.md").write_text("Second", encoding="utf-8")
        (tmp_path / "a_prompt.txt").write_text("First\n", encoding="utf-8")
        (tmp_path / "empty.txt").write_text("  ", encoding="utf-8")
        (tmp_path / "image.png").write_bytes(b"\x89PNG")

        assert load_prompts(tmp_path) == {"a_prompt": "First", "b_prompt": "Second"}

    def test_missing_directory(self, tmp_path):
        assert load_prompts(tmp_path / "missing") == {}


class TestReadUpload:
    def upload(self, data, filename="scan.png"):
        return UploadFile(file=io.BytesIO(data), filename=filename)

    async def test_no_file(self):
        assert await read_upload(None, field="file", max_bytes=10, too_large_message="big") is None

    async def test_reads_data(self):
        upload = await read_upload(self.upload(b"12345"), field="file", max_bytes=10, too_large_message="big")

        assert upload.data == b"12345"
        assert upload.filename == "scan.png"
        assert upload.content_type == "application/octet-stream"

    async def test_empty_file(self):
        with pytest.raises(ValidationError):
            await read_upload(self.upload(b""), field="file", max_bytes=10, too_large_message="big")

    async def test_too_large(self):
        with pytest.raises(PayloadTooLargeError) as exc_info:
            await read_upload(
                self.upload(b"x" * 11),
                field="file",
                max_bytes=10,
                too_large_message="The file is too large. Maximum 10MB allowed.",
            )

        assert exc_info.value.message == "The file is too large. Maximum 10MB allowed."
        assert exc_info.value.details["actual_bytes"] == 11
