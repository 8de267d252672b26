"""Price oracle adapter caching per-asset quotes with staleness validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from structlog import get_logger

from bankcore.domain.assets import Clock, TokenConfig, system_clock
from bankcore.domain.errors import StalePrice

logger = get_logger(__name__)

USD_VALUE_DECIMALS = 18


@dataclass(frozen=True, slots=True)
class PriceReport:
    """Latest answer published by a price feed."""

    price: int
    updated_at: int


class PriceSource(Protocol):
    """External price feed provider."""

    async def get_latest_price(self, feed: str) -> PriceReport:
        ...

    async def price_decimals(self, feed: str) -> int:
        ...


def normalize_amount(amount: int, decimals: int, target_decimals: int = USD_VALUE_DECIMALS) -> int:
    """Rescale a raw amount between fixed-point precisions, truncating."""

    if decimals <= target_decimals:
        return amount * 10 ** (target_decimals - decimals)
    return amount // 10 ** (decimals - target_decimals)


class PriceOracleAdapter:
    """Refreshes and reads the price snapshot cached on each ``TokenConfig``.

    Fetch failures are best effort: they leave the previous snapshot in place.
    Reports that are stale or non-positive are rejected with ``StalePrice``.
    """

    def __init__(
        self,
        source: PriceSource,
        *,
        stale_threshold_seconds: int = 12 * 60 * 60,
        clock: Clock = system_clock,
    ) -> None:
        self._source = source
        self._stale_threshold = stale_threshold_seconds
        self._clock = clock

    @property
    def stale_threshold(self) -> int:
        return self._stale_threshold

    async def refresh_price(self, config: TokenConfig) -> bool:
        """Fetch the latest report for ``config`` and overwrite its snapshot.

        Returns True when the snapshot was updated, False when there is no feed
        or the source could not be reached.
        """

        feed = config.price_feed
        if not feed:
            return False

        try:
            report = await self._source.get_latest_price(feed)
            decimals = config.price_decimals
            if decimals is None:
                decimals = await self._source.price_decimals(feed)
        except Exception as exc:
            logger.warning(
                "price_fetch_failed",
                asset=config.asset,
                feed=feed,
                error=str(exc),
                cached_price=config.last_price,
                cached_at=config.price_updated_at,
            )
            return False

        now = self._clock()
        if report.price <= 0:
            raise StalePrice(config.asset, f"non-positive price {report.price}")
        if now - report.updated_at > self._stale_threshold:
            raise StalePrice(
                config.asset,
                f"report from {report.updated_at} is older than {self._stale_threshold}s",
            )

        config.last_price = report.price
        config.price_updated_at = report.updated_at
        config.price_decimals = decimals
        logger.debug(
            "price_refreshed",
            asset=config.asset,
            price=report.price,
            updated_at=report.updated_at,
        )
        return True

    def ensure_fresh(self, config: TokenConfig) -> None:
        """Raise ``StalePrice`` unless the cached snapshot is usable right now."""

        if config.last_price <= 0 or config.price_decimals is None:
            raise StalePrice(config.asset, "no price cached")
        age = config.price_age(self._clock())
        if age > self._stale_threshold:
            raise StalePrice(config.asset, f"cached price is {age}s old")

    def usd_value(self, config: TokenConfig, amount: int) -> int:
        """Value of ``amount`` in 18-decimal fixed-point USD.

        Assets without a price feed are valued at zero.
        """

        if not config.price_feed:
            return 0
        self.ensure_fresh(config)
        if config.price_decimals is None:
            raise StalePrice(config.asset, "feed decimals unknown")
        normalized = normalize_amount(amount, config.decimals)
        return normalized * config.last_price // 10**config.price_decimals


__all__ = [
    "USD_VALUE_DECIMALS",
    "PriceOracleAdapter",
    "PriceReport",
    "PriceSource",
    "normalize_amount",
]
