"""Unit tests for JSON recovery from model replies."""

import pytest

from medtools.pipeline.core.exceptions import MalformedResponseError
from medtools.pipeline.processors.llm_response import (
    extract_json_object,
    repair_json,
    strip_markdown_fence,
)


class TestExtractJsonObject:
    """Tests for the extraction strategies, in order."""

    def test_plain_json(self):
        assert extract_json_object('{"pathologic": "no", "severity": 0}') == {
            "pathologic": "no",
            "severity": 0,
        }

    def test_fenced_json_block(self):
        raw = (
            "Here is the analysis:\n"
            "```json\n"
            '{"pathologic": "no", "severity": 0, "summary": "Normal study", "keywords": ["normal"]}\n'
            "```\n"
            "Let me know if you need more."
        )

        result = extract_json_object(raw)

        assert result["keywords"] == ["normal"]

    def test_untagged_fence(self):
        raw = '```\n{"summary": "ok"}\n```'

        assert extract_json_object(raw) == {"summary": "ok"}

    def test_balanced_object_in_prose(self):
        """Braces inside string values do not end the object."""
        raw = 'Sure! {"diagnostic": "mass {3 cm}", "severity": 4} hope this helps'

        assert extract_json_object(raw) == {"diagnostic": "mass {3 cm}", "severity": 4}

    def test_single_quotes_and_trailing_comma_repaired(self):
        raw = "{'pathologic': 'yes', 'severity': 5, 'keywords': ['a', 'b',],}"

        assert extract_json_object(raw) == {
            "pathologic": "yes",
            "severity": 5,
            "keywords": ["a", "b"],
        }

    def test_bare_keys_repaired(self):
        raw = 'Result: {pathologic: "yes", severity: 7, diagnostic: "Fracture"}'

        assert extract_json_object(raw) == {
            "pathologic": "yes",
            "severity": 7,
            "diagnostic": "Fracture",
        }

    def test_apostrophe_inside_double_quoted_value_survives(self):
        raw = "{\"summary\": \"Patient's lungs are clear\", 'severity': 0,}"

        assert extract_json_object(raw)["summary"] == "Patient's lungs are clear"

    def test_no_object_raises_with_excerpt(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            extract_json_object("I am unable to analyze this report.")

        assert exc_info.value.excerpt == "I am unable to analyze this report."

    def test_top_level_array_is_rejected(self):
        with pytest.raises(MalformedResponseError):
            extract_json_object("[1, 2, 3]")

    def test_excerpt_is_truncated(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            extract_json_object("x" * 500)

        assert len(exc_info.value.excerpt) == 200


class TestRepairJson:
    def test_string_contents_untouched_by_comma_fix(self):
        assert repair_json('{"a": "1,}", }') == '{"a": "1,}"}'

    def test_whitespace_collapsed(self):
        assert repair_json('{\n  "a":\n 1\n}') == '{ "a": 1 }'


class TestStripMarkdownFence:
    def test_markdown_fence_removed(self):
        assert strip_markdown_fence("```markdown\n# Title\n\nBody\n```") == "# Title\n\nBody"

    def test_unfenced_text_is_trimmed(self):
        assert strip_markdown_fence("  plain text \n") == "plain text"

    def test_partial_fence_kept(self):
        text = "Intro\n```markdown\n# Title\n```"

        assert strip_markdown_fence(text) == text
