"""
Core configuration module for the GenAI Gateway.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the GENAI_GATEWAY_ prefix.

The gateway core never parses the environment itself: the lifespan hands a
Settings instance to ProviderBinding.initialize(), which decides readiness.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields use the GENAI_GATEWAY_ prefix for environment variables.
    Example: GENAI_GATEWAY_GEMINI_API_KEY=AIza...
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="genai-gateway",
        description="Name of the service for logging and identification",
    )
    version: str = Field(
        default="1.0.0",
        description="Service version reported by the health endpoint",
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    cors_origins: str = Field(
        default="",
        description="Comma-separated allowed origins outside development",
    )

    # =========================================================================
    # Upstream Provider (Gemini)
    # SecretStr masks the key in logs/repr, use .get_secret_value() to access
    # =========================================================================
    gemini_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Google Generative AI API key; empty means not configured",
    )
    gemini_model: Optional[str] = Field(
        default=None,
        description="Model identifier; unknown values fall back to the default",
    )
    gemini_base_url: Optional[str] = Field(
        default=None,
        description="Alternate upstream endpoint (proxy or regional gateway)",
    )
    upstream_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Transport timeout for upstream HTTP calls",
    )

    # =========================================================================
    # Generation Defaults
    # =========================================================================
    default_temperature: float = Field(
        default=0.7,
        description="Sampling temperature used when a request does not set one",
    )
    default_max_output_tokens: Optional[int] = Field(
        default=None,
        description="Output token budget used when a request does not set one",
    )

    # =========================================================================
    # Streaming
    # =========================================================================
    stream_buffer_size: int = Field(
        default=16,
        ge=1,
        le=1024,
        description="Fragments buffered between the upstream reader and the transport",
    )

    model_config = {
        "env_prefix": "GENAI_GATEWAY_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("gemini_base_url")
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Strip trailing slashes; reject non-HTTP endpoints."""
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("Base URL must start with http:// or https://")
        return v.rstrip("/")

    def get_cors_origins(self) -> list[str]:
        """
        Get CORS allowed origins based on environment.

        - Development: Allow all origins (["*"])
        - Staging/Production: Use cors_origins (comma-separated)
        - If not configured outside development: Empty list
        """
        if self.environment == "development":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses functools.lru_cache to ensure only one Settings instance is created.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
