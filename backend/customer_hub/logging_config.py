"""
Structured logging with structlog.

- console or JSON rendering, picked by ``Settings.log_format``
- request-scoped fields (customer_id, request_id) merged from contextvars
- stdlib loggers (uvicorn, sqlalchemy) routed through the same handler
"""
from __future__ import annotations

import datetime
import logging
import logging.config
import sys
from typing import Any, Optional

import structlog

from .config import get_settings


def add_timestamp(logger, method_name, event_dict):
    event_dict["timestamp"] = datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds")
    return event_dict


def bind_customer_context(
    *,
    customer_id: Optional[str] = None,
    request_id: Optional[str] = None,
    path: Optional[str] = None,
    method: Optional[str] = None,
    **extras: Any,
) -> None:
    """Bind request context fields; None values are skipped."""
    payload = {
        k: v
        for k, v in dict(
            customer_id=customer_id,
            request_id=request_id,
            path=path,
            method=method,
            **extras,
        ).items()
        if v is not None
    }
    if payload:
        structlog.contextvars.bind_contextvars(**payload)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def _level(level: str) -> int:
    return getattr(logging, (level or "INFO").upper(), logging.INFO)


def setup_logging() -> None:
    """Idempotent structured logging configuration."""
    settings = get_settings()
    json_output = settings.log_format == "json"

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": "%(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": sys.stdout,
            },
        },
        "root": {"level": _level(settings.log_level), "handlers": ["console"]},
        "loggers": {
            "uvicorn.access": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            "httpx": {"level": "WARNING", "handlers": ["console"], "propagate": False},
        },
    })

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_timestamp,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
