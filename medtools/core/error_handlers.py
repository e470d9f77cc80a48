"""
RFC 7807 problem responses for errors that escape the tool endpoints.

Tool endpoints answer their own errors with ``{"error": message}``; these
handlers cover unknown routes, wrong methods and failures outside a tool run.
"""

import logging
from typing import Mapping, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from medtools.api.schemas import ProblemDetail
from medtools.core.utils import ensure_trace_id
from medtools.pipeline.core.exceptions import BaseError

logger = logging.getLogger(__name__)


def _problem_response(
    request: Request,
    trace_id: str,
    status_code: int,
    code: str,
    title: str,
    detail: str,
    category: str,
    retryable: bool = False,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    problem = ProblemDetail(
        type=f"/errors/{code}",
        title=title,
        status=status_code,
        detail=detail,
        instance=request.url.path,
        code=code,
        category=category,
        retryable=retryable,
        trace_id=trace_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=problem.model_dump(exclude_none=True),
        headers={"X-Trace-ID": trace_id, **(headers or {})},
    )


async def handle_app_error(request: Request, exc: BaseError):
    """Service errors raised while preparing a tool, e.g. no LLM client."""
    trace_id = ensure_trace_id(request)
    logger.error(
        f"Service error: {exc.message}",
        extra={
            "trace_id": trace_id,
            "error_code": exc.error_code,
            "path": request.url.path,
            "http_status": exc.http_status,
        },
    )
    body = exc.to_dict()
    return _problem_response(
        request,
        trace_id,
        exc.http_status,
        exc.error_code,
        title=body["title"],
        detail=body.get("detail") or exc.message,
        category=body["category"],
        retryable=exc.retryable,
    )


async def handle_http_error(request: Request, exc: StarletteHTTPException):
    """Unknown routes and unsupported methods."""
    trace_id = ensure_trace_id(request)
    logger.warning(
        f"HTTP {exc.status_code} for {request.method} {request.url.path}",
        extra={"trace_id": trace_id, "http_status": exc.status_code, "path": request.url.path},
    )
    return _problem_response(
        request,
        trace_id,
        exc.status_code,
        f"HTTP_{exc.status_code}",
        title=str(exc.detail),
        detail=str(exc.detail),
        category="server_error" if exc.status_code >= 500 else "client_error",
        headers=exc.headers,
    )


async def handle_unknown_error(request: Request, exc: Exception):
    trace_id = ensure_trace_id(request)
    logger.exception("Unexpected error", extra={"trace_id": trace_id, "path": request.url.path})
    return _problem_response(
        request,
        trace_id,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        title="Internal server error",
        detail="An unexpected error occurred. Please contact support with trace ID.",
        category="server_error",
    )
