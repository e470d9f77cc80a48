"""
Recover a JSON object from free-form model output.

Small local models wrap their JSON in prose, code fences, Python-style
quotes or trailing commas. Extraction tries progressively looser strategies
and the first one that yields a JSON object wins:

  1) the whole reply parsed as JSON
  2) the body of a ```json (or untagged) code fence
  3) the first balanced top-level {...} in the reply
  4) the candidates above after textual repairs
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Iterator

from medtools.pipeline.core.config import ERROR_BODY_MAX_CHARS
from medtools.pipeline.core.exceptions import MalformedResponseError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```([A-Za-z0-9_+-]*)[ \t]*\r?\n?(.*?)```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")
_WHITESPACE_RE = re.compile(r"\s+")
_UNESCAPED_DQUOTE_RE = re.compile(r'(?<!\\)"')


def _try_parse_object(text: str) -> dict[str, Any] | None:
    try:
        obj = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return obj if isinstance(obj, dict) else None


def _fenced_blocks(text: str) -> Iterator[str]:
    for match in _FENCE_RE.finditer(text):
        if match.group(1).lower() in ("", "json"):
            yield match.group(2).strip()


def _first_balanced_object(text: str) -> str | None:
    """Return the first top-level ``{...}`` span, ignoring braces inside quotes."""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    quote: str | None = None
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def _split_literals(text: str) -> list[tuple[bool, str]]:
    """Split text into (is_string_literal, segment) pairs."""
    segments: list[tuple[bool, str]] = []
    buf: list[str] = []
    quote: str | None = None
    escaped = False

    for ch in text:
        if quote is None:
            if ch in "\"'":
                if buf:
                    segments.append((False, "".join(buf)))
                buf = [ch]
                quote = ch
            else:
                buf.append(ch)
            continue

        buf.append(ch)
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == quote:
            segments.append((True, "".join(buf)))
            buf = []
            quote = None

    if buf:
        segments.append((quote is not None, "".join(buf)))
    return segments


def _map_code(text: str, fn: Callable[[str], str]) -> str:
    return "".join(
        segment if is_literal else fn(segment)
        for is_literal, segment in _split_literals(text)
    )


def _to_double_quoted(literal: str) -> str:
    if len(literal) < 2 or not literal.endswith("'"):
        return literal
    inner = literal[1:-1].replace("\\'", "'")
    return '"' + _UNESCAPED_DQUOTE_RE.sub('\\\\"', inner) + '"'


def _convert_single_quotes(text: str) -> str:
    return "".join(
        _to_double_quoted(segment) if is_literal and segment.startswith("'") else segment
        for is_literal, segment in _split_literals(text)
    )


def repair_json(text: str) -> str:
    """Apply the textual repairs in order.

    Trailing commas and bare keys are only fixed outside string literals.
    Whitespace collapsing also normalises raw newlines inside strings.
    """
    text = _map_code(text, lambda s: _TRAILING_COMMA_RE.sub(r"\1", s))
    text = _map_code(text, lambda s: _BARE_KEY_RE.sub(r'\1"\2"\3', s))
    text = _convert_single_quotes(text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_json_object(raw_text: str) -> dict[str, Any]:
    """Extract the JSON object the model meant to return.

    Args:
        raw_text: Message content returned by the model

    Returns:
        Parsed JSON object

    Raises:
        MalformedResponseError: If no strategy yields a JSON object
    """
    text = (raw_text or "").strip()

    obj = _try_parse_object(text)
    if obj is not None:
        return obj

    fenced = list(_fenced_blocks(text))
    for block in fenced:
        obj = _try_parse_object(block)
        if obj is not None:
            return obj

    balanced = _first_balanced_object(text)
    if balanced is not None:
        obj = _try_parse_object(balanced)
        if obj is not None:
            return obj

    candidates = fenced + ([balanced] if balanced is not None else []) + [text]
    for candidate in candidates:
        repaired = repair_json(candidate)
        obj = _try_parse_object(repaired)
        if obj is None:
            inner = _first_balanced_object(repaired)
            obj = _try_parse_object(inner) if inner is not None else None
        if obj is not None:
            logger.debug("Recovered JSON object after repair")
            return obj

    excerpt = (raw_text or "")[:ERROR_BODY_MAX_CHARS]
    logger.warning("No JSON object found in model reply", extra={"error_code": "MALFORMED_RESPONSE"})
    raise MalformedResponseError(excerpt)


_MARKDOWN_FENCE_RE = re.compile(r"^```(?:markdown|md)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def strip_markdown_fence(text: str) -> str:
    """Remove a single fence wrapping the whole reply, as in ```markdown ... ```."""
    stripped = text.strip()
    match = _MARKDOWN_FENCE_RE.match(stripped)
    return match.group(1) if match else stripped
