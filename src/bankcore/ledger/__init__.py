"""Settlement-unit ledger."""

from bankcore.ledger.ledger import Ledger

__all__ = ["Ledger"]
