import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from medtools.api.schemas import HealthResponse
from medtools.core.dependencies import get_llm_client
from medtools.core.settings import llm_settings
from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.core.exceptions import LLMClientError

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(client: LLMClient = Depends(get_llm_client)):
    started = time.perf_counter()
    error = None
    try:
        await client.list_models()
    except LLMClientError as e:
        error = e.message
    healthy = error is None

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "service": "medical-ai-tools",
            "version": "1.0.0",
            "llm": {
                "endpoint": llm_settings.endpoint,
                "status": "reachable" if healthy else "unreachable",
                "latency_ms": round((time.perf_counter() - started) * 1000, 1),
                "error": error,
            },
        },
    )
