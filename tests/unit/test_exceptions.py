"""Unit tests for exception hierarchy."""

from medtools.pipeline.core.exceptions import (
    BaseError,
    ClientError,
    ErrorCategory,
    ExternalServiceError,
    LLMClientError,
    LLMHTTPError,
    LLMNetworkError,
    LLMOutputError,
    LLMResponseError,
    MalformedResponseError,
    OutOfRangeError,
    PayloadTooLargeError,
    ResourceNotFoundError,
    ServerError,
    ValidationError,
)


class TestBaseError:
    """Tests for BaseError class."""

    def test_base_error_creation(self):
        """Test BaseError can be created with all parameters."""
        error = BaseError(
            message="Test error",
            error_code="TEST_ERROR",
            category=ErrorCategory.CLIENT_ERROR,
            http_status=400,
            details={"detail": "Additional info", "field": "test"},
            retryable=False,
        )

        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.error_code == "TEST_ERROR"
        assert error.category == ErrorCategory.CLIENT_ERROR
        assert error.http_status == 400
        assert error.details == {"detail": "Additional info", "field": "test"}
        assert error.retryable is False

    def test_base_error_to_dict(self):
        """Test BaseError converts to RFC 7807 format."""
        error = BaseError(
            message="Test error",
            error_code="TEST_ERROR",
            category=ErrorCategory.CLIENT_ERROR,
            http_status=400,
            details={"detail": "Additional context"},
        )

        result = error.to_dict()

        assert result["type"] == "/errors/TEST_ERROR"
        assert result["title"] == "Test error"
        assert result["status"] == 400
        assert result["code"] == "TEST_ERROR"
        assert result["category"] == "client_error"
        assert result["detail"] == "Additional context"
        assert result["retryable"] is False


class TestClientError:
    """Tests for ClientError and subclasses."""

    def test_client_error_defaults(self):
        error = ClientError(message="Client error", error_code="CLIENT")

        assert error.http_status == 400
        assert error.category == ErrorCategory.CLIENT_ERROR
        assert error.retryable is False

    def test_validation_error_keeps_field(self):
        """The user-facing message is kept verbatim."""
        error = ValidationError(message="The report cannot be empty.", field="report")

        assert error.message == "The report cannot be empty."
        assert error.field == "report"
        assert error.http_status == 422
        assert error.details["field"] == "report"
        assert isinstance(error, ClientError)

    def test_payload_too_large(self):
        error = PayloadTooLargeError("The file is too large. Maximum 10MB allowed.", 10, 11)

        assert error.http_status == 413
        assert error.details == {"max_bytes": 10, "actual_bytes": 11}

    def test_resource_not_found(self):
        error = ResourceNotFoundError("Nothing found", "PubMed article", "aspirin")

        assert error.http_status == 404
        assert error.details["resource_id"] == "aspirin"


class TestServerError:
    """Tests for ServerError and subclasses."""

    def test_server_error_defaults(self):
        error = ServerError(message="Boom", error_code="BOOM")

        assert error.http_status == 500
        assert error.category == ErrorCategory.SERVER_ERROR

    def test_external_service_timeout(self):
        error = ExternalServiceError("WEB", "timeout")

        assert error.http_status == 504
        assert error.retryable is True
        assert error.error_code == "WEB_TIMEOUT"
        assert error.message == "WEB service timeout"

    def test_external_service_http(self):
        error = ExternalServiceError("PUBMED", "http", message="Search failed")

        assert error.http_status == 502
        assert error.retryable is False
        assert error.message == "Search failed"
        assert error.details["service"] == "PUBMED"


class TestLLMErrors:
    """Tests for LLM transport and output errors."""

    def test_network_error_message(self):
        error = LLMNetworkError("connection refused")

        assert error.message == "Connection error: connection refused"
        assert error.error_type == "unavailable"
        assert isinstance(error, LLMClientError)
        assert isinstance(error, ExternalServiceError)

    def test_network_timeout(self):
        error = LLMNetworkError("timed out", timeout=True)

        assert error.http_status == 504
        assert error.error_code == "LLM_TIMEOUT"

    def test_http_error_message(self):
        error = LLMHTTPError(429, "Too Many Requests - Rate limit exceeded", body="slow down")

        assert error.message == "API error: HTTP 429 - Too Many Requests - Rate limit exceeded"
        assert error.status_code == 429
        assert error.details["body"] == "slow down"

    def test_response_error_default_message(self):
        assert LLMResponseError().message == "Invalid API response format"

    def test_malformed_response_carries_excerpt(self):
        error = MalformedResponseError("I cannot help with that")

        assert error.message == "Invalid JSON response from model (Content: I cannot help with that...)"
        assert error.excerpt == "I cannot help with that"
        assert error.to_dict()["detail"] == "I cannot help with that"
        assert error.http_status == 502

    def test_out_of_range_names_field(self):
        error = OutOfRangeError("severity", 11, 0, 10)

        assert error.field == "severity"
        assert error.error_code == "OUT_OF_RANGE"
        assert isinstance(error, LLMOutputError)
        assert error.category == ErrorCategory.VALIDATION
