"""Risk limit enforcement."""

from bankcore.risk.manager import (
    DailyLimitStore,
    DailyStatus,
    InMemoryDailyLimitStore,
    RiskLimitManager,
    RiskLimits,
    UserDailyLimits,
    effective_counters,
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
