"""
Custom exceptions for the GenAI Gateway.

This module provides a hierarchy of custom exceptions for the gateway.
All exceptions inherit from GenAIGatewayException and include error codes for
consistent error handling and API responses.

Classification:
- Configuration errors (ProviderNotInitializedError): client-actionable, 400
- Validation errors (GatewayValidationError, MessageConversionError): 400
- Upstream errors (ProviderError and subclasses): 502, or a terminal
  stream frame once streaming has begun
"""

from enum import Enum
from typing import Any


# =============================================================================
# Error Codes Enum
# =============================================================================


class ErrorCode(str, Enum):
    """
    Error codes for gateway exceptions.

    These codes provide a consistent way to identify error types
    across the API and in logging.
    """

    GATEWAY_ERROR = "GATEWAY_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    PROVIDER_NOT_INITIALIZED = "PROVIDER_NOT_INITIALIZED"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONVERSION_ERROR = "CONVERSION_ERROR"


# =============================================================================
# Base Exception
# =============================================================================


class GenAIGatewayException(Exception):
    """
    Base exception for all gateway errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GATEWAY_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code

        for key, value in kwargs.items():
            setattr(self, key, value)


# =============================================================================
# Configuration Errors
# =============================================================================


class ProviderNotInitializedError(GenAIGatewayException):
    """
    Raised when a generation operation runs before the provider binding is ready.

    This is an expected runtime state (missing credential), not a programming
    error: requests are rejected with a deterministic client error until the
    process is restarted with corrected configuration.
    """

    def __init__(
        self,
        message: str = "Provider not initialized",
        error_code: str = ErrorCode.PROVIDER_NOT_INITIALIZED,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)


# =============================================================================
# Upstream Errors
# =============================================================================


class ProviderError(GenAIGatewayException):
    """
    Exception for upstream provider issues.

    Raised when communication with the provider fails, including network
    errors, non-success status codes and malformed provider responses.

    Attributes:
        provider: Name of the provider (e.g., "gemini").
        status_code: HTTP status code from the provider API (if applicable).
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        error_code: str = ErrorCode.PROVIDER_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the provider error.

        Args:
            message: Human-readable error message.
            provider: Name of the LLM provider.
            status_code: HTTP status code from provider (optional).
            error_code: Machine-readable error code.
            **kwargs: Additional attributes.
        """
        super().__init__(message, error_code, **kwargs)
        self.provider = provider
        self.status_code = status_code


class AuthenticationError(ProviderError):
    """Upstream rejected the credential (HTTP 401/403)."""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            provider,
            status_code=status_code,
            error_code=ErrorCode.AUTHENTICATION_ERROR,
            **kwargs,
        )


class RateLimitError(ProviderError):
    """
    Upstream quota or rate limit exceeded (HTTP 429).

    Attributes:
        retry_after: Seconds suggested by the upstream before retrying.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        retry_after: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            provider,
            status_code=429,
            error_code=ErrorCode.RATE_LIMIT_ERROR,
            **kwargs,
        )
        self.retry_after = retry_after


# =============================================================================
# Validation Errors
# =============================================================================


class GatewayValidationError(GenAIGatewayException):
    """
    Exception for request validation errors.

    Note: Named GatewayValidationError to avoid conflict with
    pydantic.ValidationError.

    Attributes:
        field: Name of the field that failed validation.
        value: The invalid value (if safe to include).
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        error_code: str = ErrorCode.VALIDATION_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the validation error.

        Args:
            message: Human-readable error message.
            field: Name of the invalid field (optional).
            value: The invalid value (optional).
            error_code: Machine-readable error code.
            **kwargs: Additional attributes.
        """
        super().__init__(message, error_code, **kwargs)
        self.field = field
        self.value = value


class MessageConversionError(GatewayValidationError):
    """
    A UI message part cannot be reduced to model-message content.

    Attributes:
        part_type: The unsupported part type discriminator.
        message_index: Position of the offending message in the request.
    """

    def __init__(
        self,
        part_type: str,
        message_index: int,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Unsupported message part type '{part_type}' in messages[{message_index}]",
            field=f"messages[{message_index}].parts",
            value=part_type,
            error_code=ErrorCode.CONVERSION_ERROR,
            **kwargs,
        )
        self.part_type = part_type
        self.message_index = message_index
