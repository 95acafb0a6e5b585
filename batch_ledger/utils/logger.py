"""structlog setup for the ledger: colored console lines, plus JSONL records when LOG_TO_FILE is on."""

from __future__ import annotations

import logging
from typing import Any

import structlog

from batch_ledger.config import LOG_DIR, LOG_FILE, LOG_LEVEL, LOG_TO_FILE, VERBOSE_LOGGING

BoundLogger = structlog.stdlib.BoundLogger

# SQL echo and per-request access lines stay out of the ledger's own stream.
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "uvicorn.access", "httpx", "httpcore")

_configured = False


def _resolve_level() -> int:
    if VERBOSE_LOGGING:
        return logging.DEBUG
    raw = LOG_LEVEL.strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else logging.INFO


def _handler(handler: logging.Handler, level: int, renderer: Any, pre_chain: list) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)
    )
    return handler


def _configure_logging() -> None:
    global _configured
    if _configured:
        return

    level = _resolve_level()
    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    handlers = [
        _handler(logging.StreamHandler(), level, structlog.dev.ConsoleRenderer(colors=True), shared)
    ]
    if LOG_TO_FILE:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _handler(
                logging.FileHandler(LOG_FILE, encoding="utf-8"),
                level,
                structlog.processors.JSONRenderer(),
                shared,
            )
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)
    logging.captureWarnings(True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            *shared,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str = "batch_ledger", **bindings: Any) -> BoundLogger:
    """Return a structlog logger for name, configuring logging on first use."""
    _configure_logging()
    logger = structlog.get_logger(name)
    return logger.bind(**bindings) if bindings else logger


def bind_context(**context: Any) -> None:
    """Attach key/values to every log line emitted from the current context."""
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
