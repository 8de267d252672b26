"""Structured logging for the bank core.

Every record is rendered as one JSON object over stdlib ``logging``. Entry
points bind the operation, user and asset into contextvars so log lines
emitted deep inside the router or oracle carry them without threading them
through every call.
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager

import structlog

from bankcore.config import get_settings


def _get_shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(level: str | None = None) -> None:
    """Route structlog through stdlib logging with a JSON renderer.

    The level defaults to the ``LOG_LEVEL`` carried by the active settings.
    """

    if level is None:
        level = get_settings().log_level

    structlog.configure(
        processors=[
            *_get_shared_processors(),
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
    )


def operation_context(operation: str, **fields: object) -> AbstractContextManager:
    """Bind ``operation`` and identifying fields for the duration of a block."""

    return structlog.contextvars.bound_contextvars(operation=operation, **fields)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
