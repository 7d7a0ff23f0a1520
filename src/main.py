"""
GenAI Gateway - Main Application Entry Point

This module provides the FastAPI application for the GenAI Gateway service.
The gateway exposes one upstream model provider through three delivery
patterns: complete text, token stream, and UI message stream passthrough.

Startup binds the provider from configuration once; a missing credential
leaves the gateway serving with every generation request rejected (400)
and /health/ready reporting 503.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.errors import register_exception_handlers
from src.api.gate import RequestGate
from src.api.middleware.logging import REQUEST_ID_HEADER, RequestLoggingMiddleware
from src.api.routes.generate import router as generate_router
from src.api.routes.health import router as health_router
from src.core.config import Settings, get_settings
from src.observability.logging import configure_logging, get_logger
from src.observability.metrics import MetricsMiddleware, get_metrics_app
from src.providers.binding import ProviderBinding
from src.services.generation import GenerationEngine

# Application metadata
APP_NAME = "GenAI Gateway"
APP_DESCRIPTION = "Gateway to a hosted generative model: complete text, token streams and chat"


# =============================================================================
# Lifespan Context Manager
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan: bind the provider on startup, release it on shutdown.

    The binding is written here, before requests are served, and only read
    afterwards.
    """
    settings: Settings = app.state.settings
    binding: ProviderBinding = app.state.provider_binding

    configure_logging(level=settings.log_level)
    logger = get_logger("genai_gateway.main")
    logger.info(
        "starting",
        service=settings.service_name,
        version=settings.version,
        environment=settings.environment,
    )

    if binding.initialize(settings):
        logger.info("provider ready", model=binding.current_model().value)
    else:
        logger.warning(
            "provider not initialized",
            reason="GENAI_GATEWAY_GEMINI_API_KEY is not set",
        )

    app.state.initialized = True

    yield

    logger.info("shutting down", service=settings.service_name)
    app.state.initialized = False
    await binding.aclose()


# =============================================================================
# Application Factory
# =============================================================================


def create_app(
    settings: Optional[Settings] = None,
    binding: Optional[ProviderBinding] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (default: from the environment).
        binding: Provider binding (default: a Gemini binding, initialized
            during startup).

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    binding = binding or ProviderBinding()
    is_production = settings.environment == "production"

    app = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=settings.version,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.provider_binding = binding
    app.state.generation_engine = GenerationEngine(binding, buffer_size=settings.stream_buffer_size)
    app.state.request_gate = RequestGate(binding)
    app.state.initialized = False

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "x-vercel-ai-ui-message-stream"],
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(generate_router)
    app.mount("/metrics", get_metrics_app())

    @app.get("/", tags=["Info"])
    async def root() -> dict[str, Any]:
        """Basic service information."""
        return {
            "service": APP_NAME,
            "version": settings.version,
            "model": app.state.provider_binding.current_model().value,
            "docs": "disabled" if is_production else "/docs",
        }

    return app


app = create_app()
