"""Utility modules for logging, request tracing, and common helpers."""

from goalpulse.utils.logging import configure_logging, get_logger, log_event

__all__ = ["configure_logging", "get_logger", "log_event"]
