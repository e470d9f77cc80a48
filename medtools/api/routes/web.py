"""Web page tools: sum, wps and scp."""

from fastapi import APIRouter, Request

from medtools.api.inputs import RequestParams
from medtools.api.tool_endpoint import run_endpoint
from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.runner import ToolContext
from medtools.pipeline.tools.registry import get_tool
from medtools.services.analysis import process_url

router = APIRouter(tags=["web"])


async def _process(client: LLMClient, ctx: ToolContext, params: RequestParams):
    return await process_url(client, ctx, params.get("url"))


@router.api_route("/sum", methods=["GET", "POST"])
async def summarize_page(request: Request):
    return await run_endpoint(request, get_tool("sum"), _process)


@router.api_route("/wps", methods=["GET", "POST"])
async def web_page_summary(request: Request):
    return await run_endpoint(request, get_tool("wps"), _process)


@router.api_route("/scp", methods=["GET", "POST"])
async def parse_content(request: Request):
    return await run_endpoint(request, get_tool("scp"), _process)
