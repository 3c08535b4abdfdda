"""Structured logging configuration using structlog.

Provides correlation IDs for tracing concurrent analyses and configurable
output formats (JSON for production, colored console for dev).
"""

import logging
import sys
from collections.abc import MutableMapping
from contextvars import ContextVar
from typing import Any, cast

import structlog
from structlog.types import Processor

from framefit.config import settings

# Context variables for correlation IDs
_analysis_id: ContextVar[str | None] = ContextVar("analysis_id", default=None)
_ref: ContextVar[str | None] = ContextVar("ref", default=None)
_attempt: ContextVar[int | None] = ContextVar("attempt", default=None)


def set_correlation_context(
    analysis_id: str | None = None,
    ref: str | None = None,
    attempt: int | None = None,
) -> None:
    """Set correlation IDs for the current async context.

    Args:
        analysis_id: Unique identifier for one analysis invocation
        ref: Resource reference being analyzed
        attempt: Current probe attempt number
    """
    if analysis_id is not None:
        _analysis_id.set(analysis_id)
    if ref is not None:
        _ref.set(ref)
    if attempt is not None:
        _attempt.set(attempt)


def clear_correlation_context() -> None:
    """Clear all correlation context variables."""
    _analysis_id.set(None)
    _ref.set(None)
    _attempt.set(None)


def _add_correlation_ids(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor to add correlation IDs to log events."""
    _ = logger, method_name  # Required by structlog processor signature
    analysis_id = _analysis_id.get()
    ref = _ref.get()
    attempt = _attempt.get()

    if analysis_id is not None:
        event_dict["analysis_id"] = analysis_id
    if ref is not None:
        event_dict["ref"] = ref
    if attempt is not None:
        event_dict["attempt"] = attempt

    return event_dict


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Configure structlog with the specified settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings.LOG_LEVEL.
        log_format: Output format ("console" or "json").
                    Defaults to settings.LOG_FORMAT.
    """
    level = level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_correlation_ids,
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure stdlib logging to match; stdout is reserved for CLI output
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        A bound structlog logger instance.
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
