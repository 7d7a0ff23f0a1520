"""
Unit tests for src/core/exceptions.py - exception hierarchy and error codes.
"""

import pytest

from src.core.exceptions import (
    AuthenticationError,
    ErrorCode,
    GatewayValidationError,
    GenAIGatewayException,
    MessageConversionError,
    ProviderError,
    ProviderNotInitializedError,
    RateLimitError,
)


class TestExceptionHierarchy:
    """Every gateway error derives from GenAIGatewayException."""

    @pytest.mark.parametrize(
        "exc_class",
        [
            ProviderNotInitializedError,
            ProviderError,
            AuthenticationError,
            RateLimitError,
            GatewayValidationError,
            MessageConversionError,
        ],
    )
    def test_subclasses_base(self, exc_class):
        assert issubclass(exc_class, GenAIGatewayException)

    def test_upstream_subclasses(self):
        assert issubclass(AuthenticationError, ProviderError)
        assert issubclass(RateLimitError, ProviderError)

    def test_conversion_error_is_validation_error(self):
        assert issubclass(MessageConversionError, GatewayValidationError)


class TestExceptionAttributes:
    """Messages, codes and extra attributes."""

    def test_base_defaults(self):
        exc = GenAIGatewayException("boom")

        assert exc.message == "boom"
        assert str(exc) == "boom"
        assert exc.error_code == ErrorCode.GATEWAY_ERROR

    def test_kwargs_set_as_attributes(self):
        exc = GenAIGatewayException("boom", request_id="req-1")

        assert exc.request_id == "req-1"

    def test_not_initialized_message_is_deterministic(self):
        exc = ProviderNotInitializedError()

        assert exc.message == "Provider not initialized"
        assert exc.error_code == ErrorCode.PROVIDER_NOT_INITIALIZED

    def test_provider_error_fields(self):
        exc = ProviderError("upstream down", provider="gemini", status_code=503)

        assert exc.provider == "gemini"
        assert exc.status_code == 503
        assert exc.error_code == ErrorCode.PROVIDER_ERROR

    def test_authentication_error_code(self):
        exc = AuthenticationError("bad key", provider="gemini", status_code=403)

        assert exc.error_code == ErrorCode.AUTHENTICATION_ERROR
        assert exc.status_code == 403

    def test_rate_limit_error_fields(self):
        exc = RateLimitError("slow down", provider="gemini", retry_after=30)

        assert exc.status_code == 429
        assert exc.retry_after == 30
        assert exc.error_code == ErrorCode.RATE_LIMIT_ERROR

    def test_validation_error_fields(self):
        exc = GatewayValidationError("Prompt is required", field="prompt", value=None)

        assert exc.field == "prompt"
        assert exc.value is None
        assert exc.error_code == ErrorCode.VALIDATION_ERROR

    def test_conversion_error_names_part_and_message(self):
        exc = MessageConversionError("tool-weather", 2)

        assert exc.part_type == "tool-weather"
        assert exc.message_index == 2
        assert exc.field == "messages[2].parts"
        assert "tool-weather" in exc.message
        assert exc.error_code == ErrorCode.CONVERSION_ERROR
