"""PubMed search with a model-written summary per article."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.clients.pubmed_client import PubMedArticle, PubMedClient
from medtools.pipeline.core.exceptions import ResourceNotFoundError
from medtools.pipeline.runner import ToolContext, run_tool
from medtools.services.inputs import require_text

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No relevant articles found for your query. Please try different search terms."


def merge_article(article: PubMedArticle, summary: dict[str, Any]) -> dict[str, Any]:
    """Combine PubMed bibliographic data with the model's summary fields."""
    return {
        "title": article.title,
        "authors": article.authors,
        "journal": article.journal,
        "year": article.year,
        "summary": summary["summary"],
        "key_findings": summary["key_findings"],
        "methodology": summary.get("methodology", ""),
        "pmid": article.pmid,
    }


async def search_literature(
    client: LLMClient,
    ctx: ToolContext,
    query: Optional[str],
    pubmed: Optional[PubMedClient] = None,
) -> dict[str, Any]:
    """Search PubMed and summarize each of the top articles.

    The first failing summary aborts the search with its error.
    """
    query = require_text(ctx.tool, query)
    articles = await (pubmed or PubMedClient()).search(query)
    if not articles:
        raise ResourceNotFoundError(NO_RESULTS_MESSAGE, "PubMed article", query)

    results = []
    for article in articles:
        payload = json.dumps({"query": query, **article.to_dict()}, ensure_ascii=False)
        summary = await run_tool(client, ctx, payload)
        results.append(merge_article(article, summary))
    return {"results": results}
