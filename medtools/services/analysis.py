"""Text and web-page tools that map one input to one model call."""

from __future__ import annotations

from typing import Any, Optional

from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.clients.web_client import fetch_page_text, validate_url
from medtools.pipeline.runner import ToolContext, run_tool
from medtools.services.inputs import require_text


async def analyze_text(client: LLMClient, ctx: ToolContext, value: Optional[str]) -> dict[str, Any]:
    """Report analysis, discharge papers, differential diagnosis and patient education."""
    text = require_text(ctx.tool, value)
    return await run_tool(client, ctx, text)


async def process_url(client: LLMClient, ctx: ToolContext, url: Optional[str]) -> dict[str, Any]:
    """Fetch a page and summarize it (schema tools) or convert it to Markdown."""
    url = validate_url(url or "")
    content = await fetch_page_text(url)
    heading = "CONTENT TO SUMMARIZE" if ctx.tool.schema is not None else "CONTENT TO PROCESS"
    return await run_tool(client, ctx, f"URL: {url}\n\n{heading}:\n{content}")
