"""
Structured Logging Module

structlog emits one JSON object per event, stamped with an ISO 8601
timestamp, the level and, inside a request, the correlation id bound by
RequestLoggingMiddleware.

configure_logging() runs once from the application lifespan. It also puts a
structlog ProcessorFormatter on the stdlib root logger and sets its level,
so records from module loggers (`logging.getLogger(__name__)`) are rendered
as the same JSON, correlation id included, and follow
GENAI_GATEWAY_LOG_LEVEL.
"""

import contextvars
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional, TextIO

import structlog
from structlog.types import EventDict, Processor


_configured: bool = False
_stdlib_handler: Optional[logging.Handler] = None

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


# =============================================================================
# Correlation ID
# =============================================================================

_request_correlation: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)


def set_correlation_id(correlation_id: str) -> contextvars.Token:
    """
    Bind a correlation id to the running context (one request).

    Returns:
        Token for reset_correlation_id()
    """
    return _request_correlation.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    _request_correlation.reset(token)


def get_correlation_id() -> Optional[str]:
    """Correlation id of the running context, or None outside a request."""
    return _request_correlation.get()


def clear_correlation_id() -> None:
    _request_correlation.set(None)


@contextmanager
def correlation_id_context(correlation_id: str) -> Iterator[None]:
    """
    Bind a correlation id for the duration of a block.

    Example:
        >>> with correlation_id_context("req-12345"):
        ...     get_logger("worker").info("fragment forwarded")
    """
    token = set_correlation_id(correlation_id)
    try:
        yield
    finally:
        reset_correlation_id(token)


# =============================================================================
# Processors
# =============================================================================


def add_correlation_id(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    correlation_id = get_correlation_id()
    if correlation_id is not None:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def rename_level(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """structlog's `log_level` key is emitted as `level`."""
    if "log_level" in event_dict:
        event_dict["level"] = event_dict.pop("log_level")
    return event_dict


# =============================================================================
# Configuration
# =============================================================================


def configure_logging(
    level: str = "INFO",
    stream: Optional[TextIO] = None,
    force: bool = False,
) -> None:
    """
    Set up structlog and the stdlib root logger.

    Only the first call takes effect unless force=True.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown names map to INFO)
        stream: Destination (default: sys.stdout)
        force: Reconfigure even if already configured (tests)
    """
    global _configured

    if _configured and not force:
        return

    numeric_level = _level_to_int(level)
    output = stream or sys.stdout

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        add_timestamp,
        add_correlation_id,
        rename_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    _install_stdlib_handler(output)
    logging.getLogger().setLevel(numeric_level)

    _configured = True


def _install_stdlib_handler(output: TextIO) -> None:
    """
    Render stdlib `logging` records through the same processors as structlog,
    so module loggers also emit JSON carrying the correlation id.
    """
    global _stdlib_handler

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            add_timestamp,
            add_correlation_id,
            rename_level,
            structlog.processors.format_exc_info,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )
    handler = logging.StreamHandler(output)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    if _stdlib_handler is not None:
        root.removeHandler(_stdlib_handler)
    root.addHandler(handler)
    _stdlib_handler = handler


def reset_logging() -> None:
    """Forget the configured state so the next configure_logging() applies. Tests only."""
    global _configured, _stdlib_handler
    if _stdlib_handler is not None:
        logging.getLogger().removeHandler(_stdlib_handler)
        _stdlib_handler = None
    _configured = False


def get_logger(
    name: str,
    stream: Optional[TextIO] = None,
    level: str = "INFO",
) -> structlog.BoundLogger:
    """
    Structured logger with `logger` bound to name.

    Configures logging with the given stream and level if nothing has yet.

    Example:
        >>> logger = get_logger("genai_gateway")
        >>> logger.info("provider ready", model="gemini-2.0-flash")
    """
    configure_logging(level=level, stream=stream)
    return structlog.get_logger().bind(logger=name)


def _level_to_int(level: str) -> int:
    return _LEVELS.get(level.upper(), logging.INFO)
