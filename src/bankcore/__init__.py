"""Accounting and conversion core for a multi-asset custodial deposit ledger."""

from bankcore.bank import Bank, BankStats
from bankcore.config import Settings, get_settings

__all__ = ["Bank", "BankStats", "Settings", "get_settings"]
