"""Settlement-unit ledger of per-user balances and aggregate totals."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from bankcore.domain.errors import InsufficientBalance, ZeroAmount


class Ledger:
    """Per-user balances whose sum is always ``total_balance``.

    Only the deposit and withdrawal pipelines call ``credit``/``debit``; they
    are the single writers serialized by the bank's lock.
    """

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._total_balance = 0
        self.deposit_count = 0
        self.withdrawal_count = 0

    @property
    def total_balance(self) -> int:
        return self._total_balance

    def balance_of(self, user: str) -> int:
        return self._balances.get(user, 0)

    def balances(self) -> Mapping[str, int]:
        return MappingProxyType(self._balances)

    def credit(self, user: str, amount: int) -> int:
        """Add ``amount`` to ``user`` and return the new balance."""

        if amount <= 0:
            raise ZeroAmount("credit")
        balance = self._balances.get(user, 0) + amount
        self._balances[user] = balance
        self._total_balance += amount
        self.deposit_count += 1
        return balance

    def debit(self, user: str, amount: int) -> int:
        """Remove ``amount`` from ``user`` and return the new balance."""

        if amount <= 0:
            raise ZeroAmount("debit")
        available = self._balances.get(user, 0)
        if amount > available:
            raise InsufficientBalance(user, amount, available)
        self._balances[user] = available - amount
        self._total_balance -= amount
        self.withdrawal_count += 1
        return available - amount

    def revert_debit(self, user: str, amount: int) -> None:
        """Undo a debit whose follow-up transfer failed."""

        self._balances[user] = self._balances.get(user, 0) + amount
        self._total_balance += amount
        self.withdrawal_count -= 1


__all__ = ["Ledger"]
