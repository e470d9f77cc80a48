"""Pydantic response schemas for the service endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    Used for framework-level errors (unknown routes, malformed requests,
    unexpected failures). Tool endpoints answer with ``{"error": message}``.

    See: https://www.rfc-editor.org/rfc/rfc7807
    """

    type: str = Field(..., description="URI reference identifying the problem type")
    title: str = Field(..., description="Short, human-readable summary of the problem")
    status: int = Field(..., description="HTTP status code for this problem")
    detail: Optional[str] = Field(
        None, description="Human-readable explanation specific to this occurrence"
    )
    instance: Optional[str] = Field(
        None, description="URI reference identifying this specific occurrence (request path)"
    )

    # Extension members (allowed by RFC 7807)
    code: str = Field(..., description="Application-specific error code")
    category: str = Field(..., description="Error category (client_error, server_error, etc.)")
    retryable: bool = Field(default=False, description="Whether the request can be retried")
    trace_id: Optional[str] = Field(None, description="Tracing ID for log correlation")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "/errors/HTTP_404",
                "title": "Not Found",
                "status": 404,
                "detail": "Not Found",
                "instance": "/unknown",
                "code": "HTTP_404",
                "category": "client_error",
                "retryable": False,
                "trace_id": "a1b2c3d4-e5f6-7890-abcd-ef1234567890",
            }
        }
    )


class ToolError(BaseModel):
    """Error body returned by tool endpoints in API mode."""

    error: str


class LLMHealth(BaseModel):
    endpoint: str
    status: str
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    llm: LLMHealth


class ModelsResponse(BaseModel):
    models: dict[str, str]
    default_text_model: str
    default_vision_model: str


class ToolSummary(BaseModel):
    name: str
    title: str
    description: str
    path: str
    methods: list[str]
