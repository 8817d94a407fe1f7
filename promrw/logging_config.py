"""Logging configuration for promrw.

The library itself only emits structured events through ``get_logger``.
Applications (and the CLI) decide where they go by calling
``setup_logging``.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from promrw.config import get_settings


def add_timestamp(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add timestamp to log entry."""
    from datetime import datetime, timezone

    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def censor_sensitive_keys(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Remove credentials from logs, including those nested in header maps."""
    sensitive_keys = {"api_key", "password", "secret", "token", "authorization"}

    def _is_sensitive(key: str) -> bool:
        return any(sensitive in key.lower() for sensitive in sensitive_keys)

    for key in list(event_dict.keys()):
        value = event_dict[key]
        if _is_sensitive(key):
            event_dict[key] = "***REDACTED***"
        elif isinstance(value, dict):
            event_dict[key] = {
                k: "***REDACTED***" if _is_sensitive(str(k)) else v
                for k, v in value.items()
            }

    return event_dict


def setup_logging(level: str | None = None) -> None:
    """Configure structured logging.

    Args:
        level: Overrides the configured log level when given
    """
    settings = get_settings()
    log_level = level or settings.log_level

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        censor_sensitive_keys,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)


def log_error(
    logger: structlog.stdlib.BoundLogger,
    error: Exception,
    operation: str,
    **kwargs: Any,
) -> None:
    """Log an error with standard context."""
    context = {
        "operation": operation,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    context.update(kwargs)

    logger.error("operation_failed", **context)
