"""
API Dependencies

FastAPI dependency functions for the API layer. The process-wide objects
(settings, provider binding, generation engine, request gate) are created by
create_app() and kept on app.state; these functions hand them to routes.

Pattern: Centralized dependency injection. Tests can override any of these
with FastAPI's dependency_overrides mechanism.
"""

from fastapi import Request

from src.api.gate import RequestGate
from src.core.config import Settings, get_settings as _get_settings
from src.providers.binding import ProviderBinding
from src.services.generation import GenerationEngine


def get_settings(request: Request) -> Settings:
    """
    Get the settings the application was created with.

    Falls back to the environment-derived singleton.
    """
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else _get_settings()


def get_provider_binding(request: Request) -> ProviderBinding:
    """Get the process-wide ProviderBinding."""
    return request.app.state.provider_binding


def get_generation_engine(request: Request) -> GenerationEngine:
    """Get the GenerationEngine bound to the application's provider binding."""
    return request.app.state.generation_engine


def get_request_gate(request: Request) -> RequestGate:
    """Get the RequestGate bound to the application's provider binding."""
    return request.app.state.request_gate


__all__ = [
    "get_settings",
    "get_provider_binding",
    "get_generation_engine",
    "get_request_gate",
]
