"""Report analysis tools: rra, dpa, rdd and pec."""

from fastapi import APIRouter, Request

from medtools.api.inputs import RequestParams
from medtools.api.tool_endpoint import run_endpoint
from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.runner import ToolContext
from medtools.pipeline.tools.registry import get_tool
from medtools.services.analysis import analyze_text

router = APIRouter(tags=["reports"])


async def _analyze(client: LLMClient, ctx: ToolContext, params: RequestParams):
    return await analyze_text(client, ctx, params.get(ctx.tool.input_field))


@router.api_route("/rra", methods=["GET", "POST"])
async def radiology_report(request: Request):
    return await run_endpoint(request, get_tool("rra"), _analyze)


@router.api_route("/dpa", methods=["GET", "POST"])
async def discharge_paper(request: Request):
    return await run_endpoint(request, get_tool("dpa"), _analyze)


@router.api_route("/rdd", methods=["GET", "POST"])
async def differential_diagnosis(request: Request):
    return await run_endpoint(request, get_tool("rdd"), _analyze)


@router.api_route("/pec", methods=["GET", "POST"])
async def patient_education(request: Request):
    return await run_endpoint(request, get_tool("pec"), _analyze)
