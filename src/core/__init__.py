"""
Core module for the GenAI Gateway.

This module contains configuration and the exception hierarchy.
"""

from src.core.config import Settings, get_settings
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

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "GenAIGatewayException",
    "ProviderError",
    "ProviderNotInitializedError",
    "AuthenticationError",
    "RateLimitError",
    "GatewayValidationError",
    "MessageConversionError",
]
