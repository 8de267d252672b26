"""Configuration models and loading utilities for the bank core."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

import structlog
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)


class AssetSettings(BaseSettings):
    """Identifiers and precision of the reserved assets seeded at startup."""

    model_config = SettingsConfigDict(env_prefix="BANK_ASSET_")

    settlement_asset: str = Field(
        "USDC",
        description="Identifier of the settlement unit every balance is denominated in.",
    )
    settlement_decimals: int = Field(6, ge=0, le=36, description="Settlement unit precision.")
    native_asset: str = Field(
        "NATIVE",
        description="Reserved identifier denoting the chain's native asset.",
    )
    native_decimals: int = Field(18, ge=0, le=36, description="Native asset precision.")
    intermediary_asset: str = Field(
        "WETH",
        description="Canonical hop used by the primary three-hop conversion route.",
    )
    native_price_feed: str | None = Field(
        default=None,
        description="Price feed reference for the native asset, if any.",
    )
    settlement_deposit_limit: int = Field(
        10_000,
        gt=0,
        description="Per-operation settlement deposit ceiling in whole units.",
    )
    settlement_withdrawal_limit: int = Field(
        5_000,
        gt=0,
        description="Per-operation settlement withdrawal ceiling in whole units.",
    )
    native_deposit_limit: int = Field(
        10,
        gt=0,
        description="Per-operation native deposit ceiling in whole units.",
    )
    native_withdrawal_limit: int = Field(
        10,
        gt=0,
        description="Per-operation native withdrawal ceiling in whole units.",
    )


class LimitSettings(BaseSettings):
    """Global capacity and per-user daily quotas, in whole settlement units."""

    model_config = SettingsConfigDict(env_prefix="BANK_LIMIT_")

    global_cap: int = Field(1_000_000, gt=0, description="Maximum aggregate ledger balance.")
    daily_deposit_limit: int = Field(10_000, gt=0, description="Per-user deposits per day.")
    daily_withdrawal_limit: int = Field(5_000, gt=0, description="Per-user withdrawals per day.")


class OracleSettings(BaseSettings):
    """Price oracle staleness policy and source connectivity."""

    model_config = SettingsConfigDict(env_prefix="BANK_ORACLE_")

    stale_threshold_seconds: int = Field(
        12 * 60 * 60,
        gt=0,
        description="Maximum age of a price report before it is unusable.",
    )
    price_source_url: str | None = Field(
        default=None,
        description="Base URL of the HTTP price source, when one is used.",
    )
    request_timeout_seconds: float = Field(5.0, gt=0, description="HTTP price request timeout.")


class SwapSettings(BaseSettings):
    """Conversion bounds applied by the swap router."""

    model_config = SettingsConfigDict(env_prefix="BANK_SWAP_")

    max_slippage_bps: int = Field(
        300,
        ge=0,
        le=10_000,
        description="Maximum relative shortfall between quote and minimum output.",
    )
    deadline_seconds: int = Field(
        300,
        gt=0,
        description="Expiry horizon handed to the exchange for every execution.",
    )
    refund_on_failure: bool = Field(
        True,
        description="Return held custody to the user when a deposit fails after transfer-in.",
    )


@dataclass(slots=True)
class Settings:
    """Aggregated bank settings loaded from environment variables."""

    assets: AssetSettings = field(default_factory=AssetSettings)
    limits: LimitSettings = field(default_factory=LimitSettings)
    oracle: OracleSettings = field(default_factory=OracleSettings)
    swap: SwapSettings = field(default_factory=SwapSettings)
    log_level: str = "INFO"

    @property
    def settlement_scale(self) -> int:
        """Raw units per whole settlement unit."""

        return 10**self.assets.settlement_decimals

    @classmethod
    def from_env(cls) -> Settings:
        """Hydrate the composed settings model from environment variables."""

        # Real environment variables win over the local .env file.
        load_dotenv(override=False)

        settings = cls(
            assets=AssetSettings(),
            limits=LimitSettings(),
            oracle=OracleSettings(),
            swap=SwapSettings(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
        if settings.assets.intermediary_asset == settings.assets.settlement_asset:
            logger.warning(
                "intermediary_equals_settlement",
                asset=settings.assets.settlement_asset,
            )
        return settings


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop the cached singleton so the next lookup re-reads the environment."""
    global _settings
    _settings = None


__all__ = [
    "AssetSettings",
    "LimitSettings",
    "OracleSettings",
    "Settings",
    "SwapSettings",
    "get_settings",
    "reset_settings",
]
