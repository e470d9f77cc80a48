"""Image OCR endpoint.

Besides the usual JSON and HTML modes the endpoint answers two plain-text
forms used by upload helpers: ``GET /ocr?hupl`` returns the upload endpoint,
and a POST carrying a ``file`` field returns only the recognized text.
"""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from medtools.api.file_validation import read_upload
from medtools.api.inputs import RequestParams, collect_params
from medtools.api.tool_endpoint import error_response, prepare, run_endpoint
from medtools.core.settings import llm_settings
from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.core.config import IMAGE_UPLOAD_MAX_BYTES
from medtools.pipeline.core.exceptions import BaseError
from medtools.pipeline.runner import ToolContext
from medtools.pipeline.tools.registry import get_tool
from medtools.services.ocr import recognize_text

router = APIRouter(tags=["ocr"])

TOO_LARGE_MESSAGE = "The file is too large. Maximum 10MB allowed."


async def _recognize(client: LLMClient, ctx: ToolContext, params: RequestParams, with_summary: bool = True):
    upload = await read_upload(
        params.file("image"),
        field="image",
        max_bytes=IMAGE_UPLOAD_MAX_BYTES,
        too_large_message=TOO_LARGE_MESSAGE,
    )
    return await recognize_text(
        client,
        ctx,
        upload,
        summary_model=llm_settings.LLM_DEFAULT_TEXT_MODEL,
        with_summary=with_summary,
    )


async def _plain_text(request: Request, params: RequestParams) -> PlainTextResponse:
    client, ctx = await prepare(request, get_tool("ocr"), params)
    try:
        result = await _recognize(client, ctx, params, with_summary=False)
    except BaseError as e:
        return PlainTextResponse(e.message, status_code=e.http_status)
    return PlainTextResponse(result["text"])


@router.api_route("/ocr", methods=["GET", "POST"])
async def image_ocr(request: Request):
    tool = get_tool("ocr")
    if request.method == "GET" and "hupl" in request.query_params:
        return PlainTextResponse(f"endpoint: {request.url.replace(query='')}\n")

    try:
        params = await collect_params(request)
    except BaseError as e:
        return error_response(tool, e)

    if params.method == "POST" and params.is_api and "file" in params.values:
        return await _plain_text(request, params)
    return await run_endpoint(request, tool, _recognize, params=params)
