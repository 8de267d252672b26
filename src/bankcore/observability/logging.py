"""Structured record emission for deposit and withdrawal observability."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

from bankcore.events.models import LedgerRecord


class EventSink(Protocol):
    """Receives ledger records once an operation reaches its terminal state."""

    def emit(self, record: LedgerRecord) -> None:
        ...


@dataclass(slots=True)
class EventLogger:
    """Emit JSON-formatted ledger records for downstream ingestion."""

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("bankcore.events"))

    def emit(self, record: LedgerRecord) -> None:
        """Serialize and log a record with consistent metadata."""

        enriched = {
            "event_type": record.event_type.value,
            "payload": record.model_dump(mode="json", exclude={"event_type"}),
        }
        self.logger.info(json.dumps(enriched, sort_keys=True))


__all__ = ["EventLogger", "EventSink"]
