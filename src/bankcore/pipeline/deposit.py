"""Deposit pipeline crediting users after converting into the settlement unit."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, auto

from structlog import get_logger

from bankcore.domain.assets import Clock, system_clock
from bankcore.domain.custody import AssetTransfer
from bankcore.domain.errors import BankError, SwapShortfall, ZeroAmount
from bankcore.events.models import DepositRecorded
from bankcore.ledger.ledger import Ledger
from bankcore.observability.logging import EventSink
from bankcore.oracle.adapter import PriceOracleAdapter
from bankcore.registry.tokens import TokenRegistry
from bankcore.risk.manager import RiskLimitManager
from bankcore.swap.router import SwapRouter

logger = get_logger(__name__)


class DepositState(Enum):
    REQUESTED = auto()
    VALIDATED = auto()
    PRICE_REFRESHED = auto()
    CONVERTED = auto()
    LIMIT_CHECKED = auto()
    CREDITED = auto()
    REJECTED = auto()


@dataclass(slots=True)
class DepositContext:
    """Mutable state for a single deposit attempt."""

    user: str
    asset: str
    amount: int
    min_output: int = 0
    state: DepositState = DepositState.REQUESTED
    settlement_amount: int = 0
    path: tuple[str, ...] | None = None
    held_asset: str | None = None
    held_amount: int = 0
    history: list[DepositState] = field(default_factory=list)
    error: BaseException | None = None

    def advance(self, state: DepositState) -> None:
        self.history.append(state)
        self.state = state

    def hold(self, asset: str, amount: int) -> None:
        self.held_asset = asset
        self.held_amount = amount


@dataclass(slots=True)
class DepositPipeline:
    """Runs one deposit from validation to credit, failing closed at every step."""

    registry: TokenRegistry
    oracle: PriceOracleAdapter
    router: SwapRouter
    risk: RiskLimitManager
    ledger: Ledger
    custody: AssetTransfer
    events: EventSink
    refund_on_failure: bool = True
    clock: Clock = system_clock

    @property
    def settlement_asset(self) -> str:
        return self.router.settlement_asset

    async def execute(self, ctx: DepositContext) -> DepositRecorded:
        """Run the deposit described by ``ctx`` and return the emitted record."""

        try:
            await self._run(ctx)
        except BaseException as exc:
            # Cancellation must still reach REJECTED and release held custody.
            await self._reject(ctx, exc)
            raise

        record = DepositRecorded(
            user=ctx.user,
            asset=ctx.asset,
            raw_amount=ctx.amount,
            settlement_amount=ctx.settlement_amount,
            path=list(ctx.path) if ctx.path else None,
            timestamp=datetime.fromtimestamp(self.clock(), tz=UTC),
        )
        try:
            self.events.emit(record)
        except Exception:
            logger.exception("deposit_record_emit_failed", user=ctx.user, asset=ctx.asset)
        return record

    async def _run(self, ctx: DepositContext) -> None:
        if ctx.amount <= 0:
            raise ZeroAmount("deposit")
        config = self.registry.get(ctx.asset)
        self.risk.check_deposit_limit(config, ctx.amount)
        ctx.advance(DepositState.VALIDATED)

        if ctx.asset != self.settlement_asset and config.price_feed:
            await self.oracle.refresh_price(config)
            self.oracle.ensure_fresh(config)
        ctx.advance(DepositState.PRICE_REFRESHED)

        await self.custody.transfer_in(ctx.asset, ctx.user, ctx.amount)
        ctx.hold(ctx.asset, ctx.amount)

        try:
            swap = await self.router.route(ctx.asset, ctx.amount, ctx.min_output)
        except SwapShortfall as exc:
            ctx.hold(self.settlement_asset, max(exc.received, 0))
            raise
        ctx.settlement_amount = swap.amount
        ctx.path = swap.path
        ctx.hold(self.settlement_asset, swap.amount)
        ctx.advance(DepositState.CONVERTED)

        self.risk.check_bank_cap(self.ledger.total_balance, swap.amount)
        self.risk.check_and_accrue_deposit(ctx.user, swap.amount)
        ctx.advance(DepositState.LIMIT_CHECKED)

        balance = self.ledger.credit(ctx.user, swap.amount)
        ctx.hold(self.settlement_asset, 0)
        ctx.advance(DepositState.CREDITED)
        logger.info(
            "deposit_credited",
            user=ctx.user,
            asset=ctx.asset,
            raw_amount=ctx.amount,
            settlement_amount=swap.amount,
            balance=balance,
            total_balance=self.ledger.total_balance,
        )

    async def _reject(self, ctx: DepositContext, exc: BaseException) -> None:
        failed_at = ctx.state
        ctx.error = exc
        ctx.advance(DepositState.REJECTED)
        logger.warning(
            "deposit_rejected",
            user=ctx.user,
            asset=ctx.asset,
            amount=ctx.amount,
            failed_after=failed_at.name,
            reason=exc.code if isinstance(exc, BankError) else type(exc).__name__,
            error=str(exc),
        )
        if not (self.refund_on_failure and ctx.held_asset and ctx.held_amount > 0):
            return

        try:
            await self.custody.transfer_out(ctx.held_asset, ctx.user, ctx.held_amount)
        except Exception:
            logger.exception(
                "deposit_refund_failed",
                user=ctx.user,
                asset=ctx.held_asset,
                amount=ctx.held_amount,
            )
            return
        logger.info(
            "deposit_refunded",
            user=ctx.user,
            asset=ctx.held_asset,
            amount=ctx.held_amount,
        )
        ctx.hold(ctx.held_asset, 0)


__all__ = ["DepositContext", "DepositPipeline", "DepositState"]
