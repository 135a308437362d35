"""Observability: structured logging."""

from job_matcher_engine.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
)

__all__ = [
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
]
