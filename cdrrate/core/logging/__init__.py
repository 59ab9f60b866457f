"""Logging utilities for rating runs."""

from cdrrate.core.logging.config import LogConfig
from cdrrate.core.logging.logger import configure_logging, log_context, logger

__all__ = [
    "LogConfig",
    "configure_logging",
    "log_context",
    "logger",
]
