"""
Pytest configuration for the GenAI Gateway test suite.

This configuration sets up:
- Test markers for categorization
- Settings with a fake credential
- A ProviderBinding wired to FakeTextGenerationClient (no network)
- FastAPI TestClients for ready and unready gateways
"""

import asyncio
import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.config import Settings  # noqa: E402
from src.providers.binding import ProviderBinding  # noqa: E402
from src.providers.fake import FakeTextGenerationClient  # noqa: E402


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Tests across several components")


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings for testing with a fake credential.

    Environment variables are ignored for the explicitly passed fields.
    """
    return Settings(
        service_name="genai-gateway-test",
        environment="development",
        gemini_api_key="test-gemini-key",
        gemini_model="gemini-2.0-flash",
        gemini_base_url=None,
        stream_buffer_size=4,
    )


@pytest.fixture
def unconfigured_settings() -> Settings:
    """Settings without a provider credential."""
    return Settings(
        service_name="genai-gateway-test",
        environment="development",
        gemini_api_key="",
    )


# =============================================================================
# Provider Fakes
# =============================================================================


@pytest.fixture
def fake_client() -> FakeTextGenerationClient:
    """
    Scripted upstream client.

    Tests adjust response_text, fragments, error and fail_after as needed.
    """
    return FakeTextGenerationClient(
        response_text="4",
        fragments=["Hel", "lo", "!"],
    )


@pytest.fixture
def fake_binding(fake_client, test_settings) -> ProviderBinding:
    """A ready ProviderBinding serving the fake client."""
    binding = ProviderBinding(client_factory=lambda **kwargs: fake_client)
    assert binding.initialize(test_settings) is True
    return binding


@pytest.fixture
def unready_binding(unconfigured_settings) -> ProviderBinding:
    """A ProviderBinding left Uninitialized (no credential)."""
    binding = ProviderBinding(client_factory=lambda **kwargs: FakeTextGenerationClient())
    assert binding.initialize(unconfigured_settings) is False
    return binding


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(test_settings, fake_binding) -> FastAPI:
    """Gateway application bound to the fake client."""
    from src.main import create_app

    return create_app(settings=test_settings, binding=fake_binding)


@pytest.fixture
def client(app) -> TestClient:
    """
    TestClient for the ready gateway.

    Used without a `with` block, so the lifespan does not run; the binding
    is already initialized by the fixture.
    """
    return TestClient(app)


@pytest.fixture
def unready_client(unconfigured_settings, unready_binding) -> TestClient:
    """TestClient for a gateway started without a credential."""
    from src.main import create_app

    return TestClient(create_app(settings=unconfigured_settings, binding=unready_binding))


# =============================================================================
# Request Payloads
# =============================================================================


@pytest.fixture
def hello_chat_payload() -> dict:
    """A one-message conversation as posted by a conversational client."""
    return {
        "id": "chat-1",
        "trigger": "submit-message",
        "messages": [
            {
                "id": "m1",
                "role": "user",
                "parts": [{"type": "text", "text": "Hello!"}],
            }
        ],
    }


# =============================================================================
# ASGI Harness
# =============================================================================


@pytest.fixture
def serve_with_failing_send():
    """
    Run a response as an ASGI 2.4 app whose send fails after `fail_after`
    messages, as a server does when the client connection drops.

    Returns the messages sent before the failure.
    """

    async def serve(response, fail_after: int) -> list[dict]:
        sent: list[dict] = []
        scope = {
            "type": "http",
            "asgi": {"version": "3.0", "spec_version": "2.4"},
            "http_version": "1.1",
            "method": "POST",
            "path": "/",
            "headers": [],
        }

        async def receive() -> dict:
            await asyncio.Event().wait()
            return {"type": "http.disconnect"}

        async def send(message: dict) -> None:
            if len(sent) >= fail_after:
                raise OSError("Connection reset by peer")
            sent.append(message)

        with pytest.raises(Exception):
            await response(scope, receive, send)
        return sent

    return serve
