"""
Prometheus Metrics Module

HTTP metrics (request counter, latency histogram, in-progress gauge)
collected by MetricsMiddleware, plus gateway-specific counters:

- genai_gateway_generations_total{operation, outcome}
    operation: complete | stream | chat
    outcome:   success | error | cancelled | rejected
- genai_gateway_stream_fragments_total{operation}
    fragments forwarded to clients on the streaming paths

The registry is exposed on /metrics via prometheus_client.make_asgi_app().
"""

import time
from typing import Any, Callable, Optional

from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    make_asgi_app,
)


# =============================================================================
# HTTP Metrics
# =============================================================================

REQUESTS_TOTAL = Counter(
    name="genai_gateway_requests_total",
    documentation="Total number of HTTP requests",
    labelnames=["method", "path", "status"],
)

REQUEST_DURATION_SECONDS = Histogram(
    name="genai_gateway_request_duration_seconds",
    documentation="HTTP request duration in seconds",
    labelnames=["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

REQUESTS_IN_PROGRESS = Gauge(
    name="genai_gateway_requests_in_progress",
    documentation="Number of HTTP requests currently being processed",
    labelnames=["method"],
)


# =============================================================================
# Generation Metrics
# =============================================================================

GENERATIONS_TOTAL = Counter(
    name="genai_gateway_generations_total",
    documentation="Generation requests by operation and outcome",
    labelnames=["operation", "outcome"],
)

STREAM_FRAGMENTS_TOTAL = Counter(
    name="genai_gateway_stream_fragments_total",
    documentation="Text fragments forwarded to streaming clients",
    labelnames=["operation"],
)


def record_generation(operation: str, outcome: str) -> None:
    """
    Record the outcome of one generation request.

    Args:
        operation: "complete", "stream" or "chat"
        outcome: "success", "error", "cancelled" or "rejected"
    """
    GENERATIONS_TOTAL.labels(operation=operation, outcome=outcome).inc()


def record_stream_fragment(operation: str, count: int = 1) -> None:
    """Record fragments forwarded on a streaming path."""
    STREAM_FRAGMENTS_TOTAL.labels(operation=operation).inc(count)


# =============================================================================
# MetricsMiddleware
# =============================================================================


class MetricsMiddleware:
    """
    ASGI middleware for Prometheus HTTP metrics.

    Increments the request counter per method/path/status, records latency
    and tracks in-progress requests. Paths in `exclude_paths` (default
    ["/metrics"]) are passed through untouched. Routes carry no dynamic
    segments, so the raw path is used as the label.

    For streamed responses the recorded duration covers the whole body.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        exclude_paths: Optional[list[str]] = None,
    ) -> None:
        self.app = app
        self.exclude_paths = exclude_paths or ["/metrics"]

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Any],
        send: Callable[..., Any],
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        path = scope.get("path", "/")

        if path in self.exclude_paths or path.rstrip("/") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        REQUESTS_IN_PROGRESS.labels(method=method).inc()
        start_time = time.perf_counter()
        status_code = "500"

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = str(message.get("status", 500))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration = time.perf_counter() - start_time
            REQUESTS_TOTAL.labels(method=method, path=path, status=status_code).inc()
            REQUEST_DURATION_SECONDS.labels(method=method, path=path).observe(duration)
            REQUESTS_IN_PROGRESS.labels(method=method).dec()


# =============================================================================
# Metrics Endpoint
# =============================================================================


def get_metrics_app() -> Callable[..., Any]:
    """ASGI app serving the Prometheus exposition format."""
    return make_asgi_app()


def generate_metrics() -> str:
    """Render the default registry in Prometheus text format."""
    return generate_latest(REGISTRY).decode("utf-8")
