"""FastAPI dependency injection functions."""

from fastapi import Request

from medtools.pipeline.clients.llm_client import LLMClient
from medtools.pipeline.core.exceptions import ServerError


async def get_llm_client(request: Request) -> LLMClient:
    """Get the shared LLM client from app state.

    Raises:
        ServerError: 503 if the client is unavailable
    """
    llm_client = getattr(request.app.state, "llm_client", None)

    if llm_client is None:
        raise ServerError(
            "LLM client unavailable",
            "LLM_CLIENT_UNAVAILABLE",
            http_status=503,
            retryable=True,
        )

    return llm_client
