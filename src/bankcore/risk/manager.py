"""Risk limit enforcement: global capacity, per-asset ceilings and daily quotas."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Protocol

from structlog import get_logger

from bankcore.domain.assets import Clock, TokenConfig, day_index, system_clock
from bankcore.domain.errors import (
    ExceedsBankCap,
    ExceedsDailyDepositLimit,
    ExceedsDailyWithdrawalLimit,
    ExceedsDepositLimit,
    ExceedsWithdrawalLimit,
)

logger = get_logger(__name__)


@dataclass(slots=True)
class UserDailyLimits:
    """Settlement-unit amounts a user moved during ``last_activity_day``."""

    deposits_used: int = 0
    withdrawals_used: int = 0
    last_activity_day: int = 0


def effective_counters(counters: UserDailyLimits | None, today: int) -> UserDailyLimits:
    """Counters as they apply on ``today``, rolled over when the window moved.

    Pure: the stored record is never modified.
    """

    if counters is None or counters.last_activity_day < today:
        return UserDailyLimits(last_activity_day=today)
    return replace(counters)


class DailyLimitStore(Protocol):
    """Persists and retrieves per-user daily counters."""

    def load(self, user: str) -> UserDailyLimits | None:
        ...

    def save(self, user: str, counters: UserDailyLimits) -> None:
        ...


class InMemoryDailyLimitStore:
    """Process-local counter store."""

    def __init__(self) -> None:
        self._counters: dict[str, UserDailyLimits] = {}

    def load(self, user: str) -> UserDailyLimits | None:
        return self._counters.get(user)

    def save(self, user: str, counters: UserDailyLimits) -> None:
        self._counters[user] = counters


@dataclass(frozen=True, slots=True)
class RiskLimits:
    """Hard limits in raw settlement units."""

    global_cap: int
    daily_deposit_limit: int
    daily_withdrawal_limit: int

    @classmethod
    def whole_units(
        cls,
        *,
        global_cap: int,
        daily_deposit_limit: int = 10_000,
        daily_withdrawal_limit: int = 5_000,
        decimals: int = 6,
    ) -> RiskLimits:
        """Build limits from whole settlement units."""

        scale = 10**decimals
        return cls(
            global_cap=global_cap * scale,
            daily_deposit_limit=daily_deposit_limit * scale,
            daily_withdrawal_limit=daily_withdrawal_limit * scale,
        )


@dataclass(frozen=True, slots=True)
class DailyStatus:
    """Read-only view of a user's daily quota usage."""

    deposits_used: int
    withdrawals_used: int
    deposit_limit: int
    withdrawal_limit: int

    @property
    def deposits_remaining(self) -> int:
        return max(self.deposit_limit - self.deposits_used, 0)

    @property
    def withdrawals_remaining(self) -> int:
        return max(self.withdrawal_limit - self.withdrawals_used, 0)


@dataclass(slots=True)
class RiskLimitManager:
    """Enforces the nested limit regimes before the ledger is mutated."""

    limits: RiskLimits
    store: DailyLimitStore = field(default_factory=InMemoryDailyLimitStore)
    clock: Clock = system_clock

    def today(self) -> int:
        return day_index(self.clock())

    def check_deposit_limit(self, config: TokenConfig, amount: int) -> None:
        if amount > config.deposit_limit:
            raise ExceedsDepositLimit(amount, config.deposit_limit)

    def check_withdrawal_limit(self, config: TokenConfig, amount: int) -> None:
        if amount > config.withdrawal_limit:
            raise ExceedsWithdrawalLimit(amount, config.withdrawal_limit)

    def check_bank_cap(self, total_balance: int, amount: int) -> None:
        if total_balance + amount > self.limits.global_cap:
            raise ExceedsBankCap(total_balance + amount, self.limits.global_cap)

    def check_and_accrue_deposit(self, user: str, amount: int) -> UserDailyLimits:
        """Accrue a deposit against the daily quota.

        Returns the counters as they were before accrual so a caller can undo it.
        """

        before = effective_counters(self.store.load(user), self.today())
        used = before.deposits_used + amount
        if used > self.limits.daily_deposit_limit:
            raise ExceedsDailyDepositLimit(used, self.limits.daily_deposit_limit)
        self.store.save(user, replace(before, deposits_used=used))
        return before

    def check_and_accrue_withdrawal(self, user: str, amount: int) -> UserDailyLimits:
        """Accrue a withdrawal against the daily quota.

        Returns the counters as they were before accrual so a caller can undo it.
        """

        before = effective_counters(self.store.load(user), self.today())
        used = before.withdrawals_used + amount
        if used > self.limits.daily_withdrawal_limit:
            raise ExceedsDailyWithdrawalLimit(used, self.limits.daily_withdrawal_limit)
        self.store.save(user, replace(before, withdrawals_used=used))
        return before

    def restore(self, user: str, counters: UserDailyLimits) -> None:
        """Put back counters returned by a previous accrual."""

        self.store.save(user, counters)
        logger.debug("daily_counters_restored", user=user)

    def daily_status(self, user: str) -> DailyStatus:
        counters = effective_counters(self.store.load(user), self.today())
        return DailyStatus(
            deposits_used=counters.deposits_used,
            withdrawals_used=counters.withdrawals_used,
            deposit_limit=self.limits.daily_deposit_limit,
            withdrawal_limit=self.limits.daily_withdrawal_limit,
        )


__all__ = [
    "DailyLimitStore",
    "DailyStatus",
    "InMemoryDailyLimitStore",
    "RiskLimitManager",
    "RiskLimits",
    "UserDailyLimits",
    "effective_counters",
]
