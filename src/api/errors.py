"""
Exception Handlers - gateway exceptions to HTTP responses.

Every rejected request is answered with the same envelope:

    {"error": {"message": "...", "code": "VALIDATION_ERROR", "type": "validation_error"}}

Mapping:
- GatewayValidationError (incl. MessageConversionError) -> 400
- ProviderNotInitializedError                          -> 400
- ProviderError (incl. AuthenticationError, RateLimitError) -> 502

Once a streamed response has begun, upstream errors are reported inside the
stream instead (see src/api/streaming.py) and never reach these handlers.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.core.exceptions import (
    GatewayValidationError,
    GenAIGatewayException,
    ProviderError,
    ProviderNotInitializedError,
    RateLimitError,
)


logger = logging.getLogger(__name__)


def error_envelope(
    exc: GenAIGatewayException,
    error_type: str,
    **extra: Any,
) -> dict[str, Any]:
    """Build the error envelope body for a gateway exception."""
    code = exc.error_code.value if hasattr(exc.error_code, "value") else str(exc.error_code)
    error: dict[str, Any] = {"message": exc.message, "code": code, "type": error_type}
    error.update({key: value for key, value in extra.items() if value is not None})
    return {"error": error}


async def validation_error_handler(request: Request, exc: GatewayValidationError) -> JSONResponse:
    logger.info(
        "Rejected %s %s: field=%s message=%s",
        request.method,
        request.url.path,
        exc.field,
        exc.message,
    )
    return JSONResponse(
        status_code=400,
        content=error_envelope(exc, "validation_error", field=exc.field),
    )


async def not_initialized_handler(
    request: Request, exc: ProviderNotInitializedError
) -> JSONResponse:
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=400, content=error_envelope(exc, "configuration_error"))


async def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    """Translate upstream failures to 502 Bad Gateway."""
    logger.error(
        "Provider error: provider=%s status_code=%s message=%s",
        exc.provider,
        exc.status_code,
        exc.message,
    )
    headers: Optional[dict[str, str]] = None
    if isinstance(exc, RateLimitError) and exc.retry_after is not None:
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=502,
        content=error_envelope(exc, "provider_error", provider=exc.provider),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the gateway exception handlers on the application."""
    app.add_exception_handler(GatewayValidationError, validation_error_handler)
    app.add_exception_handler(ProviderNotInitializedError, not_initialized_handler)
    app.add_exception_handler(ProviderError, provider_error_handler)
