"""Asset configuration and conversion route models."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

SECONDS_PER_DAY = 86_400

SwapPath = tuple[str, ...]
Clock = Callable[[], int]


def system_clock() -> int:
    """Current UNIX time in whole seconds."""

    return int(time.time())


def day_index(timestamp: int) -> int:
    """UTC calendar day a timestamp falls in."""

    return timestamp // SECONDS_PER_DAY


@dataclass(slots=True)
class TokenConfig:
    """Per-asset limits, precision and cached oracle snapshot.

    Limits are raw amounts in the asset's own units. ``price_feed`` is empty for
    the settlement unit itself, which never needs a price.
    """

    asset: str
    decimals: int
    deposit_limit: int
    withdrawal_limit: int
    price_feed: str | None = None
    supported: bool = True
    last_price: int = 0
    price_updated_at: int = 0
    price_decimals: int | None = None

    def price_age(self, now: int) -> int:
        return now - self.price_updated_at

    def has_fresh_price(self, now: int, stale_threshold: int) -> bool:
        """Return True when the cached snapshot may back a value computation."""

        return self.last_price > 0 and self.price_age(now) <= stale_threshold


__all__ = [
    "SECONDS_PER_DAY",
    "Clock",
    "SwapPath",
    "TokenConfig",
    "day_index",
    "system_clock",
]
