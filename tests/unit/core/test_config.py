"""
Unit tests for src/core/config.py - Settings Class and Singleton.

Settings are read from GENAI_GATEWAY_* environment variables.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError


class TestSettingsDefaults:
    """Default values with no environment overrides."""

    def test_settings_extends_base_settings(self):
        from pydantic_settings import BaseSettings

        from src.core.config import Settings

        assert issubclass(Settings, BaseSettings)

    def test_default_values(self):
        from src.core.config import Settings

        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.service_name == "genai-gateway"
        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.gemini_api_key.get_secret_value() == ""
        assert settings.gemini_model is None
        assert settings.gemini_base_url is None
        assert settings.default_temperature == 0.7
        assert settings.default_max_output_tokens is None
        assert settings.stream_buffer_size == 16
        assert settings.upstream_timeout_seconds == 120.0


class TestSettingsEnvironment:
    """Environment variables with the GENAI_GATEWAY_ prefix."""

    def test_reads_prefixed_variables(self):
        from src.core.config import Settings

        env = {
            "GENAI_GATEWAY_GEMINI_API_KEY": "AIza-test",
            "GENAI_GATEWAY_GEMINI_MODEL": "gemini-1.5-pro",
            "GENAI_GATEWAY_GEMINI_BASE_URL": "https://proxy.example.com/v1beta/",
            "GENAI_GATEWAY_STREAM_BUFFER_SIZE": "32",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings()

        assert settings.gemini_api_key.get_secret_value() == "AIza-test"
        assert settings.gemini_model == "gemini-1.5-pro"
        assert settings.gemini_base_url == "https://proxy.example.com/v1beta"
        assert settings.stream_buffer_size == 32

    def test_unprefixed_variables_ignored(self):
        from src.core.config import Settings

        with patch.dict(os.environ, {"GEMINI_API_KEY": "AIza-test"}, clear=True):
            settings = Settings()

        assert settings.gemini_api_key.get_secret_value() == ""

    def test_api_key_masked_in_repr(self):
        from src.core.config import Settings

        settings = Settings(gemini_api_key="AIza-secret")

        assert "AIza-secret" not in repr(settings)


class TestSettingsValidation:
    """Field validators."""

    def test_log_level_normalized(self):
        from src.core.config import Settings

        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        from src.core.config import Settings

        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_base_url_requires_http_scheme(self):
        from src.core.config import Settings

        with pytest.raises(ValidationError):
            Settings(gemini_base_url="ftp://example.com")

    def test_empty_base_url_is_none(self):
        from src.core.config import Settings

        assert Settings(gemini_base_url="").gemini_base_url is None

    def test_stream_buffer_size_bounds(self):
        from src.core.config import Settings

        with pytest.raises(ValidationError):
            Settings(stream_buffer_size=0)


class TestCorsOrigins:
    """get_cors_origins() per environment."""

    def test_development_allows_all(self):
        from src.core.config import Settings

        assert Settings(environment="development").get_cors_origins() == ["*"]

    def test_production_parses_list(self):
        from src.core.config import Settings

        settings = Settings(
            environment="production",
            cors_origins="https://app.example.com, https://admin.example.com,",
        )

        assert settings.get_cors_origins() == [
            "https://app.example.com",
            "https://admin.example.com",
        ]

    def test_production_without_origins_blocks_all(self):
        from src.core.config import Settings

        assert Settings(environment="production", cors_origins="").get_cors_origins() == []


class TestSettingsSingleton:
    """get_settings() is cached."""

    def test_get_settings_returns_same_instance(self):
        from src.core.config import get_settings

        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
