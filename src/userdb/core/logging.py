"""
userdb logging - structured logging for the data-access layer.

Every event is emitted through structlog with a fixed subsystem tag
(``service.name``) and category (``category="database"``), so log lines from
the connection manager, the migration runner and the DAO can be filtered
together.

Configuration Flow:
    ::

        configure_logging(level="INFO", json_format=True, service="userdb")
            ↓
        structlog processor chain:
          1. TimeStamper (iso)
          2. merge_contextvars
          3. add_log_level
          4. add_service_metadata
          5. elasticsearch_compatible   (JSON only)
          6. JSONRenderer | ConsoleRenderer

Usage:
    >>> from userdb.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.info("user.created", name="Jane", user_id=1)

Tags:
    logging, structlog, observability, userdb
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SUBSYSTEM = "userdb"
CATEGORY = "database"

_SERVICE_NAME = SUBSYSTEM


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    if "logger_name" in event_dict:
        event_dict["log.logger"] = event_dict.pop("logger_name")
    return event_dict


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:
    return structlog.PrintLogger(sys.stderr)


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = SUBSYSTEM,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=_stderr_logger_factory,
        # Re-resolved per call so a swapped sys.stderr (tests, CLI runners) is honoured
        cache_logger_on_first_use=False,
    )

    # SQLAlchemy's echo output goes through stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Get a structured logger bound to the ``database`` category.

    Args:
        name: Logger name (usually __name__), bound as ``logger_name``
        **initial_values: Extra key/values bound on every event
    """
    initial_values.setdefault("category", CATEGORY)
    if name is not None:
        initial_values.setdefault("logger_name", name)
    return structlog.get_logger(**initial_values)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(database="/tmp/app.sqlite"):
            logger.info("migration.applied", migration="createTables")
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "SUBSYSTEM",
    "CATEGORY",
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
