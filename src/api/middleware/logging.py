"""
Request Logging Middleware

Logs method, path, status and duration for every request, with sensitive
headers redacted, and binds a correlation id for the request's lifetime.

The correlation id is taken from the incoming X-Request-ID header or
generated, made available to structlog through the correlation id context,
and echoed back on the response.
"""

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.observability.logging import reset_correlation_id, set_correlation_id


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Headers that should be redacted (case-insensitive substring match)
SENSITIVE_HEADER_PATTERNS = [
    "authorization",
    "api-key",
    "apikey",
    "x-api-key",
    "api_key",
    "x-goog-api-key",
    "x-auth-token",
    "cookie",
    "set-cookie",
]


def redact_sensitive_headers(headers: dict[str, str]) -> dict[str, str]:
    """
    Redact sensitive headers from a headers dictionary.

    Args:
        headers: Dictionary of HTTP headers

    Returns:
        Dictionary with sensitive values replaced with [REDACTED]
    """
    redacted = {}
    for key, value in headers.items():
        key_lower = key.lower()
        is_sensitive = any(pattern in key_lower for pattern in SENSITIVE_HEADER_PATTERNS)
        redacted[key] = "[REDACTED]" if is_sensitive else value
    return redacted


def resolve_request_id(request: Request) -> str:
    """Return the caller's X-Request-ID, or a new one."""
    request_id = request.headers.get(REQUEST_ID_HEADER, "").strip()
    return request_id or uuid.uuid4().hex


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses.

    Features:
    - Logs request method, path, and client IP
    - Logs response status code and duration
    - Redacts sensitive headers from logs
    - Binds and echoes the X-Request-ID correlation id

    For streamed responses the logged duration is time to first byte.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        start_time = time.perf_counter()

        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"
        request_id = resolve_request_id(request)
        token = set_correlation_id(request_id)

        try:
            logger.debug(
                "Request: %s %s from %s request_id=%s headers=%s",
                method,
                path,
                client_host,
                request_id,
                redact_sensitive_headers(dict(request.headers)),
            )

            try:
                response = await call_next(request)
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.error(
                    "Request failed: %s %s from %s request_id=%s error=%s: %s duration=%.2fms",
                    method,
                    path,
                    client_host,
                    request_id,
                    type(e).__name__,
                    e,
                    duration_ms,
                )
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
            logger.log(
                log_level,
                "%s %s %d from %s request_id=%s duration=%.2fms",
                method,
                path,
                response.status_code,
                client_host,
                request_id,
                duration_ms,
            )

            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            reset_correlation_id(token)
