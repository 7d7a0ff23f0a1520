"""
Unit tests for src/providers/binding.py - ProviderBinding.

Readiness is decided by configuration only; no network calls are made.
"""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.config import Settings
from src.core.exceptions import ProviderNotInitializedError
from src.models.domain import DEFAULT_MODEL, ModelIdentifier
from src.providers.binding import ProviderBinding, Ready, Uninitialized
from src.providers.fake import FakeTextGenerationClient
from src.providers.gemini import GeminiClient


class TestUninitialized:
    """Binding without a credential."""

    def test_starts_uninitialized(self):
        binding = ProviderBinding()

        assert isinstance(binding.state, Uninitialized)
        assert binding.is_ready() is False

    @pytest.mark.parametrize("api_key", ["", "   "])
    def test_missing_credential_is_not_an_error(self, api_key, caplog):
        factory = MagicMock()
        binding = ProviderBinding(client_factory=factory)

        with caplog.at_level(logging.WARNING):
            assert binding.initialize(Settings(gemini_api_key=api_key)) is False

        factory.assert_not_called()
        assert binding.is_ready() is False
        assert any("credential" in record.message for record in caplog.records)

    def test_handle_raises_when_unready(self):
        binding = ProviderBinding()

        with pytest.raises(ProviderNotInitializedError, match="Provider not initialized"):
            binding.handle()

    def test_current_model_defaults_when_unready(self):
        assert ProviderBinding().current_model() is DEFAULT_MODEL


class TestReady:
    """Binding with a credential."""

    def test_initialize_builds_client_from_settings(self):
        fake = FakeTextGenerationClient()
        factory = MagicMock(return_value=fake)
        binding = ProviderBinding(client_factory=factory)
        settings = Settings(
            gemini_api_key=" AIza-test ",
            gemini_model="gemini-1.5-pro",
            gemini_base_url="https://proxy.example.com/v1beta",
            upstream_timeout_seconds=30,
        )

        assert binding.initialize(settings) is True

        factory.assert_called_once_with(
            api_key="AIza-test",
            base_url="https://proxy.example.com/v1beta",
            timeout=30.0,
        )
        assert isinstance(binding.state, Ready)
        assert binding.handle().client is fake
        assert binding.handle().model is ModelIdentifier.GEMINI_1_5_PRO

    def test_unknown_model_falls_back_to_default(self):
        binding = ProviderBinding(client_factory=lambda **kwargs: FakeTextGenerationClient())

        binding.initialize(Settings(gemini_api_key="k", gemini_model="gpt-4"))

        assert binding.current_model() is DEFAULT_MODEL

    def test_missing_model_uses_default(self):
        binding = ProviderBinding(client_factory=lambda **kwargs: FakeTextGenerationClient())

        binding.initialize(Settings(gemini_api_key="k"))

        assert binding.current_model() is DEFAULT_MODEL

    def test_initialize_twice_keeps_handle(self):
        factory = MagicMock(side_effect=lambda **kwargs: FakeTextGenerationClient())
        binding = ProviderBinding(client_factory=factory)

        binding.initialize(Settings(gemini_api_key="k"))
        first = binding.handle()
        assert binding.initialize(Settings(gemini_api_key="other")) is True

        assert binding.handle() is first
        assert factory.call_count == 1

    def test_default_factory_builds_gemini_client(self):
        binding = ProviderBinding()

        binding.initialize(Settings(gemini_api_key="k"))

        assert isinstance(binding.handle().client, GeminiClient)

    def test_handle_is_immutable(self):
        binding = ProviderBinding(client_factory=lambda **kwargs: FakeTextGenerationClient())
        binding.initialize(Settings(gemini_api_key="k"))

        with pytest.raises(AttributeError):
            binding.handle().model = ModelIdentifier.GEMINI_1_5_FLASH


class TestShutdown:
    @pytest.mark.asyncio
    async def test_aclose_closes_client(self):
        client = MagicMock()
        client.aclose = AsyncMock()
        client.provider_name = "mock"
        binding = ProviderBinding(client_factory=lambda **kwargs: client)
        binding.initialize(Settings(gemini_api_key="k"))

        await binding.aclose()

        client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_aclose_when_unready_is_noop(self):
        await ProviderBinding().aclose()
