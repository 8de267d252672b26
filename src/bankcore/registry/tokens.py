"""Token registry holding per-asset limits, precision and linked price feed."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Protocol

from structlog import get_logger

from bankcore.domain.assets import TokenConfig
from bankcore.domain.errors import (
    InvalidToken,
    StalePrice,
    TokenAlreadySupported,
    TokenNotSupported,
)
from bankcore.oracle.adapter import PriceOracleAdapter

logger = get_logger(__name__)


class TokenMetadata(Protocol):
    """Probes on-chain metadata of an asset."""

    async def decimals(self, asset: str) -> int:
        ...


class TokenRegistry:
    """Owns one ``TokenConfig`` per supported asset."""

    def __init__(
        self,
        *,
        settlement_asset: str,
        native_asset: str,
        metadata: TokenMetadata,
        oracle: PriceOracleAdapter,
    ) -> None:
        self.settlement_asset = settlement_asset
        self.native_asset = native_asset
        self._metadata = metadata
        self._oracle = oracle
        self._configs: dict[str, TokenConfig] = {}

    def seed(self, config: TokenConfig) -> None:
        """Install one of the reserved entries configured at initialization."""

        if config.asset not in (self.settlement_asset, self.native_asset):
            raise InvalidToken(config.asset, "only reserved assets may be seeded")
        self._configs[config.asset] = config

    async def register(
        self,
        asset: str,
        withdrawal_limit: int,
        deposit_limit: int,
        price_feed: str | None = None,
    ) -> TokenConfig:
        """Register a new asset and attempt an initial price refresh."""

        if asset in (self.settlement_asset, self.native_asset):
            raise InvalidToken(asset, "reserved asset identifier")
        if asset in self._configs:
            raise TokenAlreadySupported(asset)

        try:
            decimals = await self._metadata.decimals(asset)
        except Exception as exc:
            raise InvalidToken(asset, f"metadata probe failed: {exc}") from exc
        if not isinstance(decimals, int) or decimals < 0:
            raise InvalidToken(asset, f"unusable decimals {decimals!r}")

        config = TokenConfig(
            asset=asset,
            decimals=decimals,
            deposit_limit=deposit_limit,
            withdrawal_limit=withdrawal_limit,
            price_feed=price_feed or None,
        )
        self._configs[asset] = config
        logger.info(
            "token_registered",
            asset=asset,
            decimals=decimals,
            deposit_limit=deposit_limit,
            withdrawal_limit=withdrawal_limit,
            price_feed=config.price_feed,
        )

        if config.price_feed:
            try:
                await self._oracle.refresh_price(config)
            except StalePrice as exc:
                logger.warning("initial_price_rejected", asset=asset, reason=exc.reason)
        return config

    def is_supported(self, asset: str) -> bool:
        config = self._configs.get(asset)
        if config is None:
            return asset == self.native_asset
        return config.supported

    def get(self, asset: str) -> TokenConfig:
        """Return the configuration of a supported asset."""

        config = self._configs.get(asset)
        if config is None or not config.supported:
            raise TokenNotSupported(asset)
        return config

    def update_limits(
        self,
        asset: str,
        withdrawal_limit: int,
        deposit_limit: int,
    ) -> TokenConfig:
        """Overwrite the per-operation limits of a registered asset."""

        config = self._configs.get(asset)
        if config is None:
            raise TokenNotSupported(asset)
        config.withdrawal_limit = withdrawal_limit
        config.deposit_limit = deposit_limit
        logger.info(
            "token_limits_updated",
            asset=asset,
            deposit_limit=deposit_limit,
            withdrawal_limit=withdrawal_limit,
        )
        return config

    def configs(self) -> Mapping[str, TokenConfig]:
        """Read-only view of every configuration."""

        return MappingProxyType(self._configs)


__all__ = ["TokenMetadata", "TokenRegistry"]
