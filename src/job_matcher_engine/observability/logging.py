"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars

from job_matcher_core.constants import AUDIT_LOGGER

if TYPE_CHECKING:
    from job_matcher_core.config.settings import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog with JSON or console rendering.

    Routes stdlib logging through structlog so SQLAlchemy and driver
    messages share the same format. The store's audit channel has its own
    level, and with ``audit_log_file`` set its entries go to that file as
    JSON lines instead of the main log.
    """
    shared_processors: list[structlog.types.Processor] = [
        merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    json_renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    if settings.log_format == "json":
        renderer: structlog.types.Processor = json_renderer
    else:
        renderer = structlog.dev.ConsoleRenderer()

    level = _resolve_level(settings.log_level)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(_formatter(renderer, shared_processors))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Quiet noisy third-party loggers
    for name in ("sqlalchemy.engine", "aiosqlite", "asyncpg"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    audit_logger = logging.getLogger(AUDIT_LOGGER)
    for old in audit_logger.handlers:
        old.close()
    audit_logger.handlers.clear()
    audit_logger.setLevel(_resolve_level(settings.audit_log_level))
    audit_logger.propagate = settings.audit_log_file is None
    if settings.audit_log_file is not None:
        file_handler = logging.FileHandler(settings.audit_log_file, encoding="utf-8")
        file_handler.setFormatter(_formatter(json_renderer, shared_processors))
        audit_logger.addHandler(file_handler)


def bind_run_context(run_id: str) -> None:
    """Bind run_id to all subsequent log entries via contextvars."""
    bind_contextvars(run_id=run_id)


def clear_run_context() -> None:
    """Clear all bound context variables."""
    clear_contextvars()


def _formatter(
    renderer: structlog.types.Processor,
    shared_processors: list[structlog.types.Processor],
) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )


def _resolve_level(level_name: str) -> int:
    """Convert a level name string to a logging level int."""
    mapping: dict[str, int] = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return mapping.get(level_name.upper(), logging.INFO)
