"""Bank facade wiring the ledger, registry, oracle, router and risk limits.

Every state-changing operation runs under one ``asyncio.Lock`` so pipeline
invocations are linearizable; read-only queries skip the lock.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

from structlog import get_logger

from bankcore.config import Settings, get_settings
from bankcore.domain.assets import Clock, TokenConfig, system_clock
from bankcore.domain.custody import AssetTransfer
from bankcore.domain.errors import BankHalted, TokenNotSupported, Unauthorized
from bankcore.events.models import DepositRecorded, WithdrawalRecorded
from bankcore.ledger.ledger import Ledger
from bankcore.logging import configure_logging, operation_context
from bankcore.observability.logging import EventLogger, EventSink
from bankcore.oracle.adapter import PriceOracleAdapter, PriceSource
from bankcore.oracle.http_source import HttpPriceSource
from bankcore.pipeline.deposit import DepositContext, DepositPipeline
from bankcore.pipeline.withdrawal import WithdrawalPipeline
from bankcore.registry.tokens import TokenMetadata, TokenRegistry
from bankcore.risk.manager import (
    DailyLimitStore,
    DailyStatus,
    InMemoryDailyLimitStore,
    RiskLimitManager,
    RiskLimits,
)
from bankcore.swap.router import Exchange, SwapRouter

logger = get_logger(__name__)


class HaltFlag(Protocol):
    """System-wide emergency halt owned outside the core."""

    def is_halted(self) -> bool:
        ...


class Authorizer(Protocol):
    """Grants or denies administrative actions."""

    def is_authorized(self, actor: str, action: str) -> bool:
        ...


class AdminAction(str, Enum):
    REGISTER_TOKEN = "register_token"
    UPDATE_LIMITS = "update_limits"


@dataclass(frozen=True, slots=True)
class BankStats:
    """Aggregate ledger figures in raw settlement units."""

    total_balance: int
    global_cap: int
    available_capacity: int
    deposit_count: int
    withdrawal_count: int
    user_count: int


class Bank:
    """Single entry point for deposits, withdrawals and token administration."""

    def __init__(
        self,
        *,
        settings: Settings,
        price_source: PriceSource,
        exchange: Exchange,
        custody: AssetTransfer,
        metadata: TokenMetadata,
        halt_flag: HaltFlag | None = None,
        authorizer: Authorizer | None = None,
        events: EventSink | None = None,
        limit_store: DailyLimitStore | None = None,
        clock: Clock = system_clock,
    ) -> None:
        assets = settings.assets
        self.settings = settings
        self.settlement_asset = assets.settlement_asset
        self.native_asset = assets.native_asset
        self._halt_flag = halt_flag
        self._authorizer = authorizer
        self._lock = asyncio.Lock()

        if authorizer is None:
            logger.warning("authorization_gate_not_configured")

        self._oracle = PriceOracleAdapter(
            price_source,
            stale_threshold_seconds=settings.oracle.stale_threshold_seconds,
            clock=clock,
        )
        self._registry = TokenRegistry(
            settlement_asset=assets.settlement_asset,
            native_asset=assets.native_asset,
            metadata=metadata,
            oracle=self._oracle,
        )
        self._registry.seed(
            TokenConfig(
                asset=assets.settlement_asset,
                decimals=assets.settlement_decimals,
                deposit_limit=assets.settlement_deposit_limit * settings.settlement_scale,
                withdrawal_limit=assets.settlement_withdrawal_limit * settings.settlement_scale,
            )
        )
        native_scale = 10**assets.native_decimals
        self._registry.seed(
            TokenConfig(
                asset=assets.native_asset,
                decimals=assets.native_decimals,
                deposit_limit=assets.native_deposit_limit * native_scale,
                withdrawal_limit=assets.native_withdrawal_limit * native_scale,
                price_feed=assets.native_price_feed,
            )
        )

        self._router = SwapRouter(
            exchange,
            custody,
            settlement_asset=assets.settlement_asset,
            intermediary_asset=assets.intermediary_asset,
            max_slippage_bps=settings.swap.max_slippage_bps,
            deadline_seconds=settings.swap.deadline_seconds,
            clock=clock,
        )
        self._risk = RiskLimitManager(
            limits=RiskLimits.whole_units(
                global_cap=settings.limits.global_cap,
                daily_deposit_limit=settings.limits.daily_deposit_limit,
                daily_withdrawal_limit=settings.limits.daily_withdrawal_limit,
                decimals=assets.settlement_decimals,
            ),
            store=limit_store or InMemoryDailyLimitStore(),
            clock=clock,
        )
        self._ledger = Ledger()
        events = events or EventLogger()

        self._deposits = DepositPipeline(
            registry=self._registry,
            oracle=self._oracle,
            router=self._router,
            risk=self._risk,
            ledger=self._ledger,
            custody=custody,
            events=events,
            refund_on_failure=settings.swap.refund_on_failure,
            clock=clock,
        )
        self._withdrawals = WithdrawalPipeline(
            registry=self._registry,
            risk=self._risk,
            ledger=self._ledger,
            custody=custody,
            events=events,
            settlement_asset=assets.settlement_asset,
            clock=clock,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        **collaborators,
    ) -> Bank:
        """Build a bank from the process settings and the given collaborators.

        Also configures structured logging at the settings' level. Without an
        explicit ``price_source``, an ``HttpPriceSource`` is built from
        ``oracle.price_source_url``.
        """

        settings = settings or get_settings()
        configure_logging(settings.log_level)
        if collaborators.get("price_source") is None and settings.oracle.price_source_url:
            collaborators["price_source"] = HttpPriceSource(
                settings.oracle.price_source_url,
                timeout=settings.oracle.request_timeout_seconds,
            )
        return cls(settings=settings, **collaborators)

    # Pipelines ---------------------------------------------------------------

    async def deposit(
        self,
        user: str,
        asset: str,
        amount: int,
        min_output: int = 0,
    ) -> DepositRecorded:
        """Deposit ``amount`` of ``asset`` and credit its settlement value."""

        async with self._lock:
            with operation_context("deposit", user=user, asset=asset):
                self._admit()
                ctx = DepositContext(user=user, asset=asset, amount=amount, min_output=min_output)
                return await self._deposits.execute(ctx)

    async def withdraw(self, user: str, amount: int) -> WithdrawalRecorded:
        """Withdraw ``amount`` settlement units to ``user``."""

        async with self._lock:
            with operation_context("withdrawal", user=user):
                self._admit()
                return await self._withdrawals.execute(user, amount)

    # Administration ----------------------------------------------------------

    async def register_token(
        self,
        actor: str,
        asset: str,
        withdrawal_limit: int,
        deposit_limit: int,
        price_feed: str | None = None,
    ) -> TokenConfig:
        self._authorize(actor, AdminAction.REGISTER_TOKEN)
        async with self._lock:
            config = await self._registry.register(asset, withdrawal_limit, deposit_limit, price_feed)
            return replace(config)

    async def update_limits(
        self,
        actor: str,
        asset: str,
        withdrawal_limit: int,
        deposit_limit: int,
    ) -> TokenConfig:
        self._authorize(actor, AdminAction.UPDATE_LIMITS)
        async with self._lock:
            return replace(self._registry.update_limits(asset, withdrawal_limit, deposit_limit))

    async def refresh_price(self, asset: str) -> bool:
        """Refresh the cached price of a supported asset outside any deposit."""

        async with self._lock:
            return await self._oracle.refresh_price(self._registry.get(asset))

    # Introspection -----------------------------------------------------------

    def balance_of(self, user: str) -> int:
        return self._ledger.balance_of(user)

    def stats(self) -> BankStats:
        total = self._ledger.total_balance
        cap = self._risk.limits.global_cap
        return BankStats(
            total_balance=total,
            global_cap=cap,
            available_capacity=max(cap - total, 0),
            deposit_count=self._ledger.deposit_count,
            withdrawal_count=self._ledger.withdrawal_count,
            user_count=len(self._ledger.balances()),
        )

    def is_supported(self, asset: str) -> bool:
        return self._registry.is_supported(asset)

    def token_config(self, asset: str) -> TokenConfig:
        """Copy of an asset's configuration; mutating it has no effect."""

        config = self._registry.configs().get(asset)
        if config is None:
            raise TokenNotSupported(asset)
        return replace(config)

    def daily_status(self, user: str) -> DailyStatus:
        return self._risk.daily_status(user)

    async def estimate_output(self, asset: str, amount: int) -> int:
        """Expected settlement output for a deposit, used to pick ``min_output``."""

        self._registry.get(asset)
        return await self._router.estimate_output(asset, amount)

    def usd_value(self, asset: str, amount: int) -> int:
        """18-decimal USD value of ``amount`` at the cached price."""

        return self._oracle.usd_value(self._registry.get(asset), amount)

    # Gates -------------------------------------------------------------------

    def _admit(self) -> None:
        if self._halt_flag is not None and self._halt_flag.is_halted():
            logger.warning("invocation_refused_halted")
            raise BankHalted()

    def _authorize(self, actor: str, action: AdminAction) -> None:
        if self._authorizer is None:
            return
        if not self._authorizer.is_authorized(actor, action.value):
            logger.warning("admin_action_denied", actor=actor, action=action.value)
            raise Unauthorized(actor, action.value)


__all__ = ["AdminAction", "Authorizer", "Bank", "BankStats", "HaltFlag"]
