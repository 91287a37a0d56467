"""Observability and logging facades."""

from .logging import (
    LOG_FORMAT,
    configure_logging,
    get_logger,
    log_context,
    log_exception,
)

__all__ = [
    "LOG_FORMAT",
    "configure_logging",
    "get_logger",
    "log_context",
    "log_exception",
]
