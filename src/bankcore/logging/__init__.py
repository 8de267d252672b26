"""Structured logging configuration."""

from .setup import configure_logging, get_logger, operation_context

__all__ = ["configure_logging", "get_logger", "operation_context"]
