import json

from fastapi import APIRouter, Request

from medtools.api.inputs import RequestParams, collect_params
from medtools.api.tool_endpoint import error_response, run_endpoint
from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.core.exceptions import BaseError, ValidationError
from medtools.pipeline.runner import ToolContext
from medtools.pipeline.tools.registry import get_tool
from medtools.services.chat import chat_reply

router = APIRouter(tags=["chat"])


def wants_json(request: Request) -> bool:
    """Chat clients mark API calls by content negotiation instead of a submit field."""
    accept = request.headers.get("accept", "")
    content_type = request.headers.get("content-type", "")
    return "application/json" in accept or "application/json" in content_type


def _history(params: RequestParams):
    if "history" in params.body:
        return params.body["history"]
    raw = params.get("history")
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(message="Invalid chat history entry.", field="history") from e


async def _reply(client: LLMClient, ctx: ToolContext, params: RequestParams):
    return await chat_reply(client, ctx, params.get("message"), _history(params))


@router.api_route("/chat", methods=["GET", "POST"])
async def medical_chat(request: Request):
    tool = get_tool("chat")
    is_api = wants_json(request)
    try:
        params = await collect_params(request)
    except BaseError as e:
        return error_response(tool, e)
    return await run_endpoint(request, tool, _reply, params=params, is_api=is_api)
