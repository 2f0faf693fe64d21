"""Structured JSON logging with organization provisioning context."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Any, Iterator

import logging

import structlog

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(log_level: str = "INFO", stream: Any = None, cache_loggers: bool = True) -> None:
    """Configure structured JSON logging for the service."""
    level = _LEVEL_MAP.get(log_level.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=cache_loggers,
    )


def get_logger(**initial_context: Any) -> structlog.stdlib.BoundLogger:
    """Get a logger with optional initial context bindings."""
    return structlog.get_logger(**initial_context)


@contextmanager
def bound_context(
    organization_uuid: str | None = None,
    organization_key: str | None = None,
    user_login: str | None = None,
    **extra: Any,
) -> Iterator[None]:
    """Bind organization context for the duration of a block.

    Values bound by the caller beforehand are left in place, and keys
    rebound here get their previous values back on exit.
    """
    ctx: dict[str, Any] = {}
    if organization_uuid is not None:
        ctx["organization_uuid"] = organization_uuid
    if organization_key is not None:
        ctx["organization_key"] = organization_key
    if user_login is not None:
        ctx["user_login"] = user_login
    ctx.update(extra)
    with structlog.contextvars.bound_contextvars(**ctx):
        yield
