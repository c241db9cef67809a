"""Telemetry module - logging and timing."""

from src.commons.telemetry.decorators import LogContext, timed
from src.commons.telemetry.logger import (
    JsonFormatter,
    TextFormatter,
    clear_log_context,
    configure_logging,
    get_job_id,
    get_log_context,
    get_logger,
    set_job_id,
    set_log_context,
)

__all__ = [
    # Decorators
    "timed",
    "LogContext",
    # Logger
    "get_logger",
    "configure_logging",
    "JsonFormatter",
    "TextFormatter",
    # Job ID
    "get_job_id",
    "set_job_id",
    # Log Context
    "get_log_context",
    "set_log_context",
    "clear_log_context",
]
