from fastapi import APIRouter, Request

from medtools.api.inputs import RequestParams
from medtools.api.tool_endpoint import run_endpoint
from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.runner import ToolContext
from medtools.pipeline.tools.registry import get_tool
from medtools.services.literature import search_literature

router = APIRouter(tags=["literature"])


async def _search(client: LLMClient, ctx: ToolContext, params: RequestParams):
    return await search_literature(client, ctx, params.get("query"))


@router.api_route("/sml", methods=["GET", "POST"])
async def medical_literature(request: Request):
    """Search PubMed and summarize the most relevant articles."""
    return await run_endpoint(request, get_tool("sml"), _search)
