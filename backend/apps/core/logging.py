"""
Structured logging configuration using structlog.

Every gateway log line is an event name plus key/value context, rendered as
JSON in deployed environments and as colored console output locally.

Usage:
    from apps.core.logging import get_logger

    logger = get_logger(__name__)
    logger.warning("rate_limit_exceeded", org_id=org.id, status=429)

Request-scoped fields are bound once by RequestContextMiddleware and the
gateway orchestrator, then merged into every line of that request:
    - trace_id: correlation id (X-Correlation-ID header or generated)
    - network.client.ip / http.useragent: caller identity
    - organization.id / usr.id: resolved tenant
    - gateway.action: action tag of the gateway operation
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor


def _rename_correlation_id(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Expose correlation_id under the trace_id key used by log search."""
    if "correlation_id" in event_dict:
        event_dict["trace_id"] = str(event_dict.pop("correlation_id"))
    return event_dict


def _convert_duration_to_nanoseconds(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Replace duration_ms with duration in nanoseconds."""
    if "duration_ms" in event_dict:
        duration_ms = event_dict.pop("duration_ms")
        if duration_ms is not None:
            event_dict["duration"] = int(duration_ms * 1_000_000)
    return event_dict


def _drop_empty_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Drop None-valued fields, e.g. a missing Origin or user agent."""
    return {key: value for key, value in event_dict.items() if value is not None}


def configure_logging(json_format: bool = True, log_level: str = "INFO") -> None:
    """
    Configure structlog with stdlib integration.

    Args:
        json_format: JSON output when True, pretty console output otherwise.
        log_level: Minimum log level to output.
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _rename_correlation_id,
        _convert_duration_to_nanoseconds,
        _drop_empty_context,
    ]

    if json_format:
        renderer: Processor = structlog.processors.JSONRenderer()
        pre_chain.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def bind_contextvars(**kwargs: Any) -> None:
    """
    Bind key-value pairs to the current request context.

    Dotted keys need dict unpacking:
        bind_contextvars(**{"organization.id": org.id, "usr.id": user.id})
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_contextvars() -> None:
    """Clear all bound context variables at the end of a request."""
    structlog.contextvars.clear_contextvars()
