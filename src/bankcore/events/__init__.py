"""Ledger records emitted for external observability."""

from .models import DepositRecorded, EventType, LedgerRecord, WithdrawalRecorded

__all__ = ["DepositRecorded", "EventType", "LedgerRecord", "WithdrawalRecorded"]
