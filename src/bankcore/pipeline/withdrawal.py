"""Withdrawal pipeline debiting settlement-unit balances."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from structlog import get_logger

from bankcore.domain.assets import Clock, system_clock
from bankcore.domain.custody import AssetTransfer
from bankcore.domain.errors import BankError, InsufficientBalance, ZeroAmount
from bankcore.events.models import WithdrawalRecorded
from bankcore.ledger.ledger import Ledger
from bankcore.observability.logging import EventSink
from bankcore.registry.tokens import TokenRegistry
from bankcore.risk.manager import RiskLimitManager

logger = get_logger(__name__)


@dataclass(slots=True)
class WithdrawalPipeline:
    """Checks, debits and pays out a withdrawal as one all-or-nothing unit."""

    registry: TokenRegistry
    risk: RiskLimitManager
    ledger: Ledger
    custody: AssetTransfer
    events: EventSink
    settlement_asset: str
    clock: Clock = system_clock

    async def execute(self, user: str, amount: int) -> WithdrawalRecorded:
        try:
            self._check(user, amount)
            before = self.risk.check_and_accrue_withdrawal(user, amount)
        except BankError as exc:
            logger.warning(
                "withdrawal_rejected",
                user=user,
                amount=amount,
                reason=exc.code,
                error=str(exc),
            )
            raise

        balance = self.ledger.debit(user, amount)
        try:
            await self.custody.transfer_out(self.settlement_asset, user, amount)
        except BaseException as exc:
            self.ledger.revert_debit(user, amount)
            self.risk.restore(user, before)
            logger.error(
                "withdrawal_transfer_failed",
                user=user,
                amount=amount,
                error=str(exc),
            )
            raise

        logger.info(
            "withdrawal_completed",
            user=user,
            amount=amount,
            balance=balance,
            total_balance=self.ledger.total_balance,
        )
        record = WithdrawalRecorded(
            user=user,
            asset=self.settlement_asset,
            amount=amount,
            timestamp=datetime.fromtimestamp(self.clock(), tz=UTC),
        )
        try:
            self.events.emit(record)
        except Exception:
            logger.exception("withdrawal_record_emit_failed", user=user)
        return record

    def _check(self, user: str, amount: int) -> None:
        if amount <= 0:
            raise ZeroAmount("withdrawal")
        available = self.ledger.balance_of(user)
        if amount > available:
            raise InsufficientBalance(user, amount, available)
        config = self.registry.get(self.settlement_asset)
        self.risk.check_withdrawal_limit(config, amount)


__all__ = ["WithdrawalPipeline"]
