"""
Shared request flow for the tool endpoints.

Every tool follows the same steps: collect parameters, load the model
catalog, resolve preferences, run the tool and present the result as JSON
(API calls) or as an HTML page (browser form submissions).
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from medtools.api.inputs import RequestParams, collect_params
from medtools.api.presenters import render_tool_page
from medtools.core.dependencies import get_llm_client
from medtools.core.settings import llm_settings
from medtools.core.utils import ensure_trace_id
from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.core.exceptions import BaseError
from medtools.pipeline.model_catalog import fetch_model_catalog
from medtools.pipeline.runner import ToolContext, resolve_context
from medtools.pipeline.tools.registry import ToolSpec

logger = logging.getLogger(__name__)

ToolHandler = Callable[[LLMClient, ToolContext, RequestParams], Awaitable[dict[str, Any]]]

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


def default_model_for(tool: ToolSpec) -> str:
    if tool.default_model:
        return tool.default_model
    if tool.vision:
        return llm_settings.LLM_DEFAULT_VISION_MODEL
    return llm_settings.LLM_DEFAULT_TEXT_MODEL


async def prepare(
    request: Request,
    tool: ToolSpec,
    params: RequestParams,
    option_choices: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> tuple[LLMClient, ToolContext]:
    """Load the model catalog and resolve the request's preferences."""
    client = await get_llm_client(request)
    models = await fetch_model_catalog(
        client,
        tool.model_filter or llm_settings.LLM_MODEL_FILTER_REGEX,
        tool.fallback_models,
    )
    ctx = resolve_context(
        tool,
        params.values,
        params.cookies,
        models,
        default_model_for(tool),
        option_choices,
    )
    return client, ctx


def has_input(tool: ToolSpec, params: RequestParams) -> bool:
    return bool(params.get(tool.input_field).strip()) or bool(params.file(tool.input_field))


def should_process(tool: ToolSpec, params: RequestParams) -> bool:
    """POST always processes; GET only for GET-enabled tools with input."""
    if params.method == "POST":
        return True
    return tool.allow_get and has_input(tool, params)


def json_response(tool: ToolSpec, content: Any, status_code: int = 200) -> JSONResponse:
    headers = CORS_HEADERS if tool.cors else None
    return JSONResponse(content=content, status_code=status_code, headers=headers)


def error_response(tool: ToolSpec, error: BaseError) -> JSONResponse:
    return json_response(tool, {"error": error.message}, error.http_status)


def html_response(
    ctx: ToolContext,
    params: RequestParams,
    result: Optional[dict[str, Any]] = None,
    error: Optional[str] = None,
    set_cookies: bool = False,
) -> HTMLResponse:
    response = HTMLResponse(render_tool_page(ctx, params.values, result, error))
    if set_cookies:
        for cookie in ctx.cookies():
            response.set_cookie(cookie.name, cookie.value, max_age=cookie.max_age, path=cookie.path)
    return response


async def run_endpoint(
    request: Request,
    tool: ToolSpec,
    handler: ToolHandler,
    *,
    option_choices: Optional[Mapping[str, Mapping[str, str]]] = None,
    params: Optional[RequestParams] = None,
    is_api: Optional[bool] = None,
) -> Response:
    """Run ``handler`` for ``tool`` and present its result.

    Args:
        request: Incoming request
        tool: Tool being served
        handler: Coroutine computing the tool result
        option_choices: Runtime choices for tool options
        params: Already collected parameters
        is_api: Override for API detection (``submit`` field by default)
    """
    trace_id = ensure_trace_id(request)
    if params is None:
        try:
            params = await collect_params(request)
        except BaseError as e:
            return error_response(tool, e)
    api_mode = params.is_api if is_api is None else is_api

    client, ctx = await prepare(request, tool, params, option_choices)

    if not should_process(tool, params):
        return html_response(ctx, params)

    result = None
    error: Optional[BaseError] = None
    try:
        result = await handler(client, ctx, params)
    except BaseError as e:
        logger.warning(
            f"Tool request failed: {e.message}",
            extra={
                "trace_id": trace_id,
                "tool": tool.name,
                "model": ctx.model,
                "error_code": e.error_code,
                "http_status": e.http_status,
                "details": e.details,
            },
        )
        error = e

    if api_mode:
        if error is not None:
            return error_response(tool, error)
        return json_response(tool, result)

    return html_response(
        ctx,
        params,
        result,
        error.message if error is not None else None,
        set_cookies=True,
    )
