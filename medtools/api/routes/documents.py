"""Document tools: soap, sde, stp and exp."""

from typing import Optional

from fastapi import APIRouter, Request

from medtools.api.file_validation import read_upload
from medtools.api.inputs import RequestParams
from medtools.api.tool_endpoint import run_endpoint
from medtools.core.settings import app_settings
from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.core.config import (
    IMAGE_UPLOAD_MAX_BYTES,
    PAPER_UPLOAD_MAX_BYTES,
    TRANSCRIPT_UPLOAD_MAX_BYTES,
)
from medtools.pipeline.runner import ToolContext
from medtools.pipeline.tools.prompt_library import load_prompts, prompt_labels
from medtools.pipeline.tools.registry import get_tool
from medtools.services.documents import (
    extract_structured_data,
    generate_soap_note,
    run_experiment,
    summarize_paper,
)
from medtools.services.inputs import Upload

router = APIRouter(tags=["documents"])


async def _upload(
    params: RequestParams,
    ctx: ToolContext,
    max_bytes: int,
    limit_label: str,
) -> Optional[Upload]:
    return await read_upload(
        params.file(ctx.tool.file_field),
        field=ctx.tool.file_field or "file",
        max_bytes=max_bytes,
        too_large_message=f"The file is too large. Maximum {limit_label} allowed.",
    )


async def _soap(client: LLMClient, ctx: ToolContext, params: RequestParams):
    upload = await _upload(params, ctx, TRANSCRIPT_UPLOAD_MAX_BYTES, "2MB")
    return await generate_soap_note(client, ctx, params.get("content"), upload)


async def _sde(client: LLMClient, ctx: ToolContext, params: RequestParams):
    upload = await _upload(params, ctx, IMAGE_UPLOAD_MAX_BYTES, "10MB")
    return await extract_structured_data(client, ctx, params.get("data"), upload)


async def _stp(client: LLMClient, ctx: ToolContext, params: RequestParams):
    upload = await _upload(params, ctx, PAPER_UPLOAD_MAX_BYTES, "1MB")
    return await summarize_paper(client, ctx, params.get("content"), upload)


@router.api_route("/soap", methods=["GET", "POST"])
async def soap_note(request: Request):
    return await run_endpoint(request, get_tool("soap"), _soap)


@router.api_route("/sde", methods=["GET", "POST"])
async def structured_data(request: Request):
    return await run_endpoint(request, get_tool("sde"), _sde)


@router.api_route("/stp", methods=["GET", "POST"])
async def summarize_this_paper(request: Request):
    return await run_endpoint(request, get_tool("stp"), _stp)


@router.api_route("/exp", methods=["GET", "POST"])
async def experiment(request: Request):
    """Free-form prompts; the prompt library is re-read on every request."""
    library = load_prompts(app_settings.prompts_dir)

    async def _exp(client: LLMClient, ctx: ToolContext, params: RequestParams):
        upload = await _upload(params, ctx, IMAGE_UPLOAD_MAX_BYTES, "10MB")
        return await run_experiment(client, ctx, params.get("prompt"), upload, library)

    return await run_endpoint(
        request,
        get_tool("exp"),
        _exp,
        option_choices={"prompt_type": prompt_labels(library)},
    )
