"""Canonical records emitted when a ledger operation completes."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Enumeration describing the terminal ledger operations."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class LedgerRecord(BaseModel):
    """Common envelope for emitted ledger records."""

    event_type: EventType
    user: str = Field(..., description="Identity whose balance changed.")
    timestamp: datetime


class DepositRecorded(LedgerRecord):
    """Emitted once a deposit has been credited."""

    event_type: Literal[EventType.DEPOSIT] = EventType.DEPOSIT
    asset: str = Field(..., description="Asset the user deposited.")
    raw_amount: int = Field(..., gt=0, description="Deposited amount in the asset's own units.")
    settlement_amount: int = Field(..., gt=0, description="Credited settlement-unit amount.")
    path: Optional[list[str]] = Field(
        default=None,
        description="Conversion route used, absent for settlement-unit deposits.",
    )


class WithdrawalRecorded(LedgerRecord):
    """Emitted once a withdrawal has been debited and transferred out."""

    event_type: Literal[EventType.WITHDRAWAL] = EventType.WITHDRAWAL
    asset: str = Field(..., description="Settlement asset transferred out.")
    amount: int = Field(..., gt=0)


__all__ = ["DepositRecorded", "EventType", "LedgerRecord", "WithdrawalRecorded"]
