"""
Health Router - liveness and readiness probes.

- GET /health        always 200 while the process serves requests
- GET /health/ready  200 when the provider binding is ready, 503 otherwise

Readiness reflects configuration only: it does not call the upstream, so a
probe never spends provider quota.
"""

import logging

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from src.api.deps import get_provider_binding, get_settings
from src.core.config import Settings
from src.providers.binding import ProviderBinding


logger = logging.getLogger(__name__)


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    checks: dict[str, bool]
    model: str


# =============================================================================
# Router
# =============================================================================

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Liveness probe: {"status": "healthy", "version": ...}."""
    return HealthResponse(status="healthy", version=settings.version)


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    response: Response,
    binding: ProviderBinding = Depends(get_provider_binding),
) -> ReadinessResponse:
    """
    Readiness probe.

    Returns:
        ReadinessResponse: {"status": "ready", "checks": {"provider": true}, "model": ...},
        with status "not_ready" and HTTP 503 while no credential is configured.
    """
    provider_ready = binding.is_ready()
    checks = {"provider": provider_ready}

    if not provider_ready:
        logger.debug("Readiness check failed: provider binding not ready")
        response.status_code = 503

    return ReadinessResponse(
        status="ready" if provider_ready else "not_ready",
        checks=checks,
        model=binding.current_model().value,
    )
