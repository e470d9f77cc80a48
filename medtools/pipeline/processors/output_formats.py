"""Normalise and render the structured data extractor's output formats."""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any

import yaml

from medtools.pipeline.core.exceptions import MalformedResponseError
from medtools.pipeline.processors.llm_response import extract_json_object, strip_markdown_fence

logger = logging.getLogger(__name__)


def _strip_any_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```") and stripped.endswith("```") and "\n" in stripped:
        return stripped.split("\n", 1)[1][:-3].strip()
    return strip_markdown_fence(stripped)


def normalize_output(content: str, output_format: str) -> Any:
    """Turn the model reply into the result for ``output_format``.

    JSON replies are parsed into an object when possible; other formats are
    returned as text with any wrapping code fence removed.
    """
    if output_format == "json":
        try:
            return extract_json_object(content)
        except MalformedResponseError:
            logger.warning("Extractor reply is not a JSON object, returning text")
            return content.strip()
    return _strip_any_fence(content)


def to_pretty_yaml(text: str) -> str:
    """Re-dump YAML text for display; invalid YAML is returned unchanged."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError:
        return text
    if not isinstance(data, (dict, list)):
        return text
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def to_pretty_xml(text: str) -> str:
    try:
        element = ET.fromstring(text)
    except ET.ParseError:
        return text
    ET.indent(element)
    return ET.tostring(element, encoding="unicode")


def to_display_text(result: Any, output_format: str) -> str:
    """Text shown in the browser view for a normalised result."""
    if not isinstance(result, str):
        return json.dumps(result, indent=2, ensure_ascii=False)
    if output_format == "yaml":
        return to_pretty_yaml(result)
    if output_format == "xml":
        return to_pretty_xml(result)
    return result
