"""
Observability Package

- Structured JSON logging with correlation ids (structlog)
- Prometheus metrics and the /metrics endpoint (prometheus_client)
"""

from src.observability.logging import (
    clear_correlation_id,
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
    reset_correlation_id,
    set_correlation_id,
)

from src.observability.metrics import (
    MetricsMiddleware,
    generate_metrics,
    get_metrics_app,
    record_generation,
    record_stream_fragment,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "set_correlation_id",
    "reset_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "correlation_id_context",
    # Metrics
    "MetricsMiddleware",
    "get_metrics_app",
    "generate_metrics",
    "record_generation",
    "record_stream_fragment",
]
