"""Request tracing middleware."""

import logging
import time

from fastapi import Request

from medtools.core.utils import ensure_trace_id

logger = logging.getLogger(__name__)


async def trace_id_middleware(request: Request, call_next):
    """Ensure every request has a trace ID in state and response headers."""
    trace_id = ensure_trace_id(request)
    started = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Trace-ID"] = trace_id
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code}",
        extra={
            "trace_id": trace_id,
            "path": request.url.path,
            "http_status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        },
    )
    return response
