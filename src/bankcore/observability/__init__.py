"""Observability helpers for emitted ledger records."""

from .logging import EventLogger, EventSink

__all__ = ["EventLogger", "EventSink"]
