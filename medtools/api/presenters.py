"""
HTML rendering for browser-mode requests.

Pages are plain server-rendered forms: one index page listing the tools and
one page per tool holding the input form, the preference selects and the
last result or error.
"""

from __future__ import annotations

import html
import json
from typing import Any, Mapping, Optional

import markdown2

from medtools.pipeline.preferences import LANGUAGES
from medtools.pipeline.processors.output_formats import to_display_text
from medtools.pipeline.runner import ToolContext
from medtools.pipeline.tools.registry import ToolSpec

_MARKDOWN_EXTRAS = ["fenced-code-blocks", "tables", "break-on-newline"]

_STYLE = """
body { font-family: system-ui, sans-serif; max-width: 960px; margin: 2rem auto; padding: 0 1rem; }
form { display: grid; gap: .75rem; }
textarea { min-height: 12rem; }
.error { background: #fee2e2; color: #991b1b; padding: .75rem; border-radius: .5rem; }
.result { border: 1px solid #e5e7eb; padding: 1rem; border-radius: .5rem; margin-top: 1.5rem; }
.badge { color: #fff; padding: .2rem .6rem; border-radius: 1rem; }
pre { white-space: pre-wrap; background: #f9fafb; padding: .75rem; }
"""


def severity_color(severity: int) -> str:
    if severity == 0:
        return "#10b981"
    if severity <= 3:
        return "#3b82f6"
    if severity <= 6:
        return "#f59e0b"
    return "#ef4444"


def severity_label(severity: int) -> str:
    if severity == 0:
        return "Normal"
    if severity <= 3:
        return "Minor"
    if severity <= 6:
        return "Moderate"
    if severity <= 8:
        return "Severe"
    return "Critic"


def format_file_size(size: int) -> str:
    """Human readable size, e.g. ``1536`` -> ``1.5 KB``."""
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def render_markdown(text: str) -> str:
    return markdown2.markdown(text, safe_mode="escape", extras=_MARKDOWN_EXTRAS)


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        f'<html><head><meta charset="utf-8"><title>{html.escape(title)}</title>'
        f"<style>{_STYLE}</style></head>"
        f"<body>{body}</body></html>"
    )


def _select(name: str, label: str, choices: Mapping[str, str], selected: str) -> str:
    options = "".join(
        f'<option value="{html.escape(value)}"{" selected" if value == selected else ""}>'
        f"{html.escape(text)}</option>"
        for value, text in choices.items()
    )
    return f'<label>{html.escape(label)} <select name="{name}">{options}</select></label>'


def _input_control(tool: ToolSpec, value: str) -> str:
    name = tool.input_field
    label = html.escape(tool.input_label)
    if tool.input_kind == "upload":
        return f'<label>{label} <input type="file" name="{name}" accept="image/*,application/pdf"></label>'
    if tool.input_kind in ("url", "query"):
        input_type = "url" if tool.input_kind == "url" else "search"
        return (
            f'<label>{label} <input type="{input_type}" name="{name}" '
            f'value="{html.escape(value)}" required></label>'
        )
    return f'<label>{label}<br><textarea name="{name}">{html.escape(value)}</textarea></label>'


def _render_form(
    ctx: ToolContext,
    values: Mapping[str, str],
    history: Optional[list[dict[str, str]]] = None,
) -> str:
    tool = ctx.tool
    value = "" if history else values.get(tool.input_field, "")
    controls = [_input_control(tool, value)]
    if history:
        controls.append(
            f'<input type="hidden" name="history" value="{html.escape(json.dumps(history, ensure_ascii=False))}">'
        )
    if tool.file_field:
        controls.append(f'<label>File <input type="file" name="{tool.file_field}"></label>')
    if ctx.models:
        controls.append(_select("model", "Model", ctx.models, ctx.model))
    controls.append(_select("language", "Language", LANGUAGES, ctx.language))
    for option in tool.options:
        choices = ctx.option_choices.get(option.name, option.choices)
        if choices:
            controls.append(_select(option.name, option.label, choices, ctx.options[option.name]))
    controls.append('<button type="submit" name="submit" value="1">Submit</button>')

    enctype = ' enctype="multipart/form-data"' if tool.file_field or tool.input_kind == "upload" else ""
    return f'<form method="post" action="{tool.path}"{enctype}>{"".join(controls)}</form>'


def _render_value(value: Any) -> str:
    if isinstance(value, list):
        items = "".join(f"<li>{_render_value(item)}</li>" for item in value)
        return f"<ul>{items}</ul>"
    if isinstance(value, dict):
        rows = "".join(
            f"<dt>{html.escape(str(key).replace('_', ' ').title())}</dt><dd>{_render_value(item)}</dd>"
            for key, item in value.items()
        )
        return f"<dl>{rows}</dl>"
    return html.escape(str(value))


def _render_severity(result: Mapping[str, Any]) -> str:
    severity = result["severity"]
    return (
        f'<p><span class="badge" style="background:{severity_color(severity)}">'
        f"{severity}/10 {severity_label(severity)}</span></p>"
    )


def render_result(tool: ToolSpec, result: Mapping[str, Any]) -> str:
    """HTML fragment for a tool result."""
    parts = []
    if "severity" in result:
        parts.append(_render_severity(result))

    if tool.name == "sde":
        text = to_display_text(result["result"], result["format"])
        if result["format"] == "markdown":
            parts.append(render_markdown(text))
        else:
            parts.append(f"<pre>{html.escape(text)}</pre>")
    elif tool.response_key and isinstance(result.get(tool.response_key), str):
        parts.append(render_markdown(result[tool.response_key]))
        if result.get("summary"):
            parts.append(f"<h3>Summary</h3><p>{html.escape(result['summary'])}</p>")
    elif tool.name == "chat":
        for message in result["history"]:
            parts.append(
                f'<div class="{message["role"]}"><strong>{html.escape(message["role"].title())}:</strong>'
                f'{render_markdown(message["content"])}</div>'
            )
    else:
        rest = {key: value for key, value in result.items() if key != "severity"}
        parts.append(_render_value(rest))

    return f'<section class="result">{"".join(parts)}</section>'


def render_tool_page(
    ctx: ToolContext,
    values: Mapping[str, str],
    result: Optional[Mapping[str, Any]] = None,
    error: Optional[str] = None,
) -> str:
    tool = ctx.tool
    body = [
        '<p><a href="/">All tools</a></p>',
        f"<h1>{html.escape(tool.title)}</h1>",
        f"<p>{html.escape(tool.description)}</p>",
        _render_form(ctx, values, result.get("history") if result else None),
    ]
    if error:
        body.append(f'<div class="error">{html.escape(error)}</div>')
    if result is not None:
        body.append(render_result(tool, result))
    return _page(tool.title, "".join(body))


def render_index(tools: Mapping[str, ToolSpec]) -> str:
    items = "".join(
        f'<li><a href="{tool.path}">{html.escape(tool.title)}</a> - {html.escape(tool.description)}</li>'
        for tool in tools.values()
    )
    return _page("Medical AI Tools", f"<h1>Medical AI Tools</h1><ul>{items}</ul>")


