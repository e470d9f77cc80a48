"""Exception hierarchy for the medical tools pipeline.

All exceptions inherit from BaseError and carry structured error information
compatible with RFC 7807 Problem Details. Tool endpoints additionally expose
the plain ``{"error": message}`` body built from ``BaseError.message``.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Error categories for classification and monitoring."""

    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    EXTERNAL_SERVICE = "external_service"
    VALIDATION = "validation"


class BaseError(Exception):
    """Base exception for all medtools errors.

    Attributes:
        message: Human-readable error message
        error_code: Application-specific error code
        category: Error category for classification
        http_status: HTTP status code to return
        details: Additional context (dict)
        retryable: Whether the operation can be retried
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        http_status: int,
        details: Optional[dict[str, Any]] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.http_status = http_status
        self.details = details or {}
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to RFC 7807 Problem Details format.

        Returns:
            Dict containing standardized error information
        """
        return {
            "type": f"/errors/{self.error_code}",
            "title": self.message,
            "status": self.http_status,
            "code": self.error_code,
            "detail": self.details.get("detail"),
            "category": self.category.value,
            "retryable": self.retryable,
        }


class ClientError(BaseError):
    """Base for client errors (4xx).

    Represents errors caused by invalid client input.
    These are not retryable.
    """

    def __init__(self, message: str, error_code: str, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.CLIENT_ERROR,
            http_status=kwargs.pop("http_status", 400),
            retryable=False,
            **kwargs,
        )


class ValidationError(ClientError):
    """Input validation failed (422 Unprocessable Entity).

    Args:
        message: Validation error description shown to the user
        field: Name of the input field that failed validation
        details: Additional validation context
    """

    def __init__(self, message: str, field: str, **kwargs):
        additional_details = kwargs.pop("details", {})
        additional_details["field"] = field
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            http_status=422,
            details=additional_details,
            **kwargs,
        )
        self.field = field


class ResourceNotFoundError(ClientError):
    """Nothing matched the request (404).

    Args:
        message: User-facing error message
        resource_type: Type of resource searched for (e.g., "PubMed article")
        resource_id: Identifier or query used for the lookup
    """

    def __init__(self, message: str, resource_type: str, resource_id: str):
        super().__init__(
            message=message,
            error_code="RESOURCE_NOT_FOUND",
            http_status=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class PayloadTooLargeError(ClientError):
    """Payload too large (413).

    The message is the user-facing text of the tool that rejected the upload.

    Args:
        message: User-facing error message
        max_bytes: Maximum allowed size in bytes
        actual_bytes: Actual payload size in bytes
    """

    def __init__(self, message: str, max_bytes: int, actual_bytes: int):
        super().__init__(
            message=message,
            error_code="PAYLOAD_TOO_LARGE",
            http_status=413,
            details={"max_bytes": max_bytes, "actual_bytes": actual_bytes},
        )


class ServerError(BaseError):
    """Base for server errors (5xx)."""

    def __init__(self, message: str, error_code: str, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=kwargs.pop("category", ErrorCategory.SERVER_ERROR),
            http_status=kwargs.pop("http_status", 500),
            retryable=kwargs.pop("retryable", False),
            **kwargs,
        )


class ExternalServiceError(ServerError):
    """External service failure (502 Bad Gateway / 504 Gateway Timeout).

    Raised when the LLM endpoint, a scraped web page or PubMed fails.

    Args:
        service_name: Name of the external service
        error_type: Type of error ("timeout", "unavailable", "http", "response", "error")
        message: User-facing message, defaults to "<service> service <error_type>"
        details: Additional error context
    """

    def __init__(
        self,
        service_name: str,
        error_type: str,
        message: Optional[str] = None,
        **kwargs,
    ):
        http_status = 504 if error_type == "timeout" else 502

        additional_details = kwargs.pop("details", {})
        additional_details.update(
            {
                "service": service_name,
                "error_type": error_type,
            }
        )

        super().__init__(
            message=message or f"{service_name} service {error_type}",
            error_code=f"{service_name.upper()}_{error_type.upper()}",
            category=ErrorCategory.EXTERNAL_SERVICE,
            http_status=http_status,
            retryable=error_type in {"timeout", "unavailable"},
            details=additional_details,
            **kwargs,
        )
        self.service_name = service_name
        self.error_type = error_type


# =============================================================================
# LLM transport errors
# =============================================================================


class LLMClientError(ExternalServiceError):
    """Base class for chat-completions transport failures."""

    def __init__(self, error_type: str, message: str, **kwargs):
        super().__init__("LLM", error_type, message=message, **kwargs)


class LLMNetworkError(LLMClientError):
    """The endpoint could not be reached (refused, DNS, timeout, redirects)."""

    def __init__(self, reason: str, timeout: bool = False):
        super().__init__(
            "timeout" if timeout else "unavailable",
            f"Connection error: {reason}",
            details={"reason": reason},
        )
        self.reason = reason


class LLMHTTPError(LLMClientError):
    """The endpoint answered with a non-200 status."""

    def __init__(self, status_code: int, explanation: str, body: str = ""):
        super().__init__(
            "http",
            f"API error: HTTP {status_code} - {explanation}",
            details={"http_code": status_code, "body": body},
        )
        self.status_code = status_code
        self.explanation = explanation


class LLMResponseError(LLMClientError):
    """The endpoint answered 200 with a body that is not a completion."""

    def __init__(self, message: str = "Invalid API response format", **kwargs):
        super().__init__("response", message, **kwargs)


# =============================================================================
# LLM output (content) errors
# =============================================================================


class LLMOutputError(ServerError):
    """The model reply could not be turned into the expected result."""

    def __init__(self, message: str, error_code: str, field: Optional[str] = None, **kwargs):
        additional_details = kwargs.pop("details", {})
        if field is not None:
            additional_details["field"] = field
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.VALIDATION,
            http_status=502,
            details=additional_details,
            **kwargs,
        )
        self.field = field


class MalformedResponseError(LLMOutputError):
    """No JSON object could be extracted from the reply."""

    def __init__(self, excerpt: str):
        super().__init__(
            f"Invalid JSON response from model (Content: {excerpt}...)",
            "MALFORMED_RESPONSE",
            details={"detail": excerpt, "excerpt": excerpt},
        )
        self.excerpt = excerpt


class MissingFieldError(LLMOutputError):
    def __init__(self, field: str):
        super().__init__(f"Missing field in model response: {field}", "MISSING_FIELD", field)


class InvalidFieldTypeError(LLMOutputError):
    def __init__(self, field: str, expected: str):
        super().__init__(
            f"Invalid type for field '{field}': expected {expected}",
            "INVALID_FIELD_TYPE",
            field,
            details={"expected": expected},
        )


class InvalidFieldValueError(LLMOutputError):
    def __init__(self, field: str, value: Any):
        super().__init__(
            f"Invalid value for field '{field}': {value!r}",
            "INVALID_FIELD_VALUE",
            field,
            details={"value": value},
        )


class OutOfRangeError(LLMOutputError):
    def __init__(self, field: str, value: Any, minimum: Any, maximum: Any):
        super().__init__(
            f"Field '{field}' out of range: {value} not in [{minimum}, {maximum}]",
            "OUT_OF_RANGE",
            field,
            details={"value": value, "minimum": minimum, "maximum": maximum},
        )


class InsufficientItemsError(LLMOutputError):
    def __init__(self, field: str, count: int, min_items: int):
        super().__init__(
            f"Field '{field}' needs at least {min_items} items, got {count}",
            "INSUFFICIENT_ITEMS",
            field,
            details={"count": count, "min_items": min_items},
        )
