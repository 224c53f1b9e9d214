"""Structured logging configuration using structlog.

Every log line is JSON. Inside an agent call the session id is bound to the
context so each line of that call carries it. Long strings are cut to
MAX_FIELD_CHARS and raw bytes are never written out.
"""

from __future__ import annotations

import logging.config
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Optional

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

_CONFIGURED = False

MAX_FIELD_CHARS = 100
TRUNCATION_MARK = "..."

# Keys written by the processors themselves; never cut
_PRESERVED_KEYS = frozenset({"event", "level", "logger", "timestamp", "session_id", "exception"})


def redact_fields(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    """Truncate long string fields and drop byte payloads."""
    for key in list(event_dict):
        if key in _PRESERVED_KEYS:
            continue
        value = event_dict[key]
        if isinstance(value, (bytes, bytearray, memoryview)):
            del event_dict[key]
        elif isinstance(value, str) and len(value) > MAX_FIELD_CHARS:
            event_dict[key] = value[:MAX_FIELD_CHARS] + TRUNCATION_MARK
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_fields,
        structlog.processors.dict_tracebacks,
    ]


def get_bound_session_id() -> Optional[str]:
    """Session id bound to the current context, if any."""
    return structlog.contextvars.get_contextvars().get("session_id")


def bind_session_id(session_id: Optional[str]) -> None:
    structlog.contextvars.bind_contextvars(session_id=session_id)


def clear_session_id() -> None:
    structlog.contextvars.unbind_contextvars("session_id")


@contextmanager
def session_context(session_id: str) -> Iterator[None]:
    """Bind session_id for the duration of the block."""
    bind_session_id(session_id)
    try:
        yield
    finally:
        clear_session_id()


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure JSON logging for the prd_builder package. Safe to call repeatedly.

    Args:
        log_level: Level name, case-insensitive (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    global _CONFIGURED

    if _CONFIGURED:
        return

    level = log_level.upper()
    handler: dict[str, Any] = {
        "class": "logging.StreamHandler",
        "formatter": "json",
        "stream": "ext://sys.stdout",
    }
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": structlog.processors.JSONRenderer(),
                    "foreign_pre_chain": _shared_processors(),
                },
            },
            "handlers": {"console": handler},
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                "prd_builder": {"level": level, "propagate": False, "handlers": ["console"]},
            },
        }
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    _CONFIGURED = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]
