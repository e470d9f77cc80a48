"""Async client for OpenAI-compatible chat-completions endpoints."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from medtools.pipeline.core.config import (
    ERROR_BODY_MAX_CHARS,
    LLM_GENERATION_TIMEOUT_SECONDS,
    LLM_MAX_REDIRECTS,
    LLM_METADATA_TIMEOUT_SECONDS,
)
from medtools.pipeline.core.exceptions import (
    LLMHTTPError,
    LLMNetworkError,
    LLMResponseError,
)

logger = logging.getLogger(__name__)

HTTP_STATUS_EXPLANATIONS = {
    400: "Bad Request - The request was malformed or contains invalid parameters",
    401: "Unauthorized - Invalid or missing API key",
    403: "Forbidden - Access denied to the requested resource",
    404: "Not Found - The requested model or endpoint does not exist",
    408: "Request Timeout - The server timed out waiting for the request",
    413: "Payload Too Large - The request is too large for the server",
    429: "Too Many Requests - Rate limit exceeded",
    500: "Internal Server Error - The server encountered an unexpected condition",
    502: "Bad Gateway - The upstream server returned an invalid response",
    503: "Service Unavailable - The server is overloaded or down for maintenance",
    504: "Gateway Timeout - The upstream server did not respond in time",
}


def explain_http_status(status_code: int) -> str:
    return HTTP_STATUS_EXPLANATIONS.get(status_code, "Unknown error")


def extract_message_content(data: Any) -> str:
    """Return ``choices[0].message.content`` from a completion body.

    Content given as a list of parts is joined from its text parts.

    Raises:
        LLMResponseError: If the body has no message content
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise LLMResponseError() from e

    if isinstance(content, list):
        content = "".join(
            part.get("text", "")
            for part in content
            if isinstance(part, dict) and part.get("type", "text") == "text"
        )
    if not isinstance(content, str):
        raise LLMResponseError()
    return content


def _read_error_body(response: httpx.Response) -> str:
    try:
        return response.text[:ERROR_BODY_MAX_CHARS]
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        return ""


class LLMClient:
    """Thin wrapper over ``httpx.AsyncClient`` for one endpoint.

    No retries are attempted; every transport failure surfaces as an
    ``LLMClientError`` subclass.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self._api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "LLMClient":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                max_redirects=LLM_MAX_REDIRECTS,
                transport=self._transport,
            )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _send(self, method: str, path: str, timeout: float, **kwargs) -> Any:
        if self._client is None:
            raise RuntimeError("Client is not started. Use 'async with LLMClient(...)'.")

        url = f"{self.endpoint}{path}"
        try:
            response = await self._client.request(
                method, url, headers=self._headers(), timeout=timeout, **kwargs
            )
        except httpx.TimeoutException as e:
            raise LLMNetworkError(str(e) or "Request timed out", timeout=True) from e
        except httpx.RequestError as e:
            raise LLMNetworkError(str(e) or type(e).__name__) from e

        if response.status_code != 200:
            raise LLMHTTPError(
                response.status_code,
                explain_http_status(response.status_code),
                body=_read_error_body(response),
            )

        try:
            return response.json()
        except ValueError as e:
            raise LLMResponseError(details={"body": _read_error_body(response)}) from e

    async def chat(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Run one chat completion and return the message content.

        Raises:
            LLMNetworkError: Endpoint unreachable or timed out
            LLMHTTPError: Non-200 status
            LLMResponseError: Body is not a completion
        """
        payload: dict[str, Any] = {"model": model, "messages": messages}
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        started = time.perf_counter()
        data = await self._send(
            "POST", "/chat/completions", LLM_GENERATION_TIMEOUT_SECONDS, json=payload
        )
        content = extract_message_content(data)

        logger.info(
            "LLM completion received",
            extra={
                "model": model,
                "service": "LLM",
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )
        return content

    async def list_models(self) -> list[str]:
        """Return the model ids advertised by ``GET /models``."""
        data = await self._send("GET", "/models", LLM_METADATA_TIMEOUT_SECONDS)
        entries = data.get("data") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise LLMResponseError()
        return [
            entry["id"]
            for entry in entries
            if isinstance(entry, dict) and isinstance(entry.get("id"), str)
        ]
