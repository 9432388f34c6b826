"""Structured logging setup with structlog."""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import AbstractContextManager

import structlog

# Per-request INFO lines from the HTTP stack; one refresh issues hundreds.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    quiet_loggers: tuple[str, ...] = _CHATTY_LOGGERS,
) -> None:
    """Configure structlog for the scanner.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: "json" for production, "console" for development.
        quiet_loggers: stdlib loggers held at WARNING or above.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(root_level)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))


def get_logger(name: str | None = None, **initial_context) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, optionally pre-bound with context."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


def refresh_context(refresh_id: str | None = None) -> AbstractContextManager:
    """Tag every log line emitted inside the block with a ``refresh_id``.

    Tasks spawned inside the block copy the context, so per-symbol
    enrichment logs carry the id of the refresh that started them.
    """
    return structlog.contextvars.bound_contextvars(refresh_id=refresh_id or uuid.uuid4().hex[:12])
