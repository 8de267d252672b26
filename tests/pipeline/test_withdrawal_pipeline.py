"""Tests for the withdrawal pipeline."""

from __future__ import annotations

import asyncio

import pytest

from bankcore.domain.assets import TokenConfig
from bankcore.domain.errors import (
    ExceedsDailyWithdrawalLimit,
    ExceedsWithdrawalLimit,
    InsufficientBalance,
    ZeroAmount,
)
from bankcore.ledger import Ledger
from bankcore.oracle import PriceOracleAdapter
from bankcore.pipeline import WithdrawalPipeline
from bankcore.registry import TokenRegistry
from bankcore.risk import RiskLimitManager, RiskLimits
from fakes import NATIVE, ONE_USDC, USDC


@pytest.fixture
def pipeline(price_source, custody, metadata, sink, clock) -> WithdrawalPipeline:
    registry = TokenRegistry(
        settlement_asset=USDC,
        native_asset=NATIVE,
        metadata=metadata,
        oracle=PriceOracleAdapter(price_source, clock=clock),
    )
    registry.seed(
        TokenConfig(
            asset=USDC,
            decimals=6,
            deposit_limit=10_000 * ONE_USDC,
            withdrawal_limit=5_000 * ONE_USDC,
        )
    )
    ledger = Ledger()
    ledger.credit("alice", 20_000 * ONE_USDC)
    return WithdrawalPipeline(
        registry=registry,
        risk=RiskLimitManager(RiskLimits.whole_units(global_cap=100_000), clock=clock),
        ledger=ledger,
        custody=custody,
        events=sink,
        settlement_asset=USDC,
        clock=clock,
    )


class TestWithdrawal:
    """Tests for successful and rejected withdrawals."""

    @pytest.mark.asyncio
    async def test_debits_and_pays_out(self, pipeline, custody, sink):
        record = await pipeline.execute("alice", 1_000 * ONE_USDC)

        assert record.amount == 1_000 * ONE_USDC
        assert record.asset == USDC
        assert pipeline.ledger.balance_of("alice") == 19_000 * ONE_USDC
        assert custody.transfers_out == [(USDC, "alice", 1_000 * ONE_USDC)]
        assert pipeline.risk.daily_status("alice").withdrawals_used == 1_000 * ONE_USDC
        assert sink.records == [record]

    @pytest.mark.asyncio
    async def test_zero_amount_is_rejected(self, pipeline, custody):
        with pytest.raises(ZeroAmount):
            await pipeline.execute("alice", 0)
        assert custody.transfers_out == []

    @pytest.mark.asyncio
    async def test_overdraft_is_rejected(self, pipeline):
        with pytest.raises(InsufficientBalance):
            await pipeline.execute("bob", 1)

    @pytest.mark.asyncio
    async def test_per_operation_limit(self, pipeline):
        with pytest.raises(ExceedsWithdrawalLimit):
            await pipeline.execute("alice", 5_000 * ONE_USDC + 1)
        assert pipeline.ledger.balance_of("alice") == 20_000 * ONE_USDC

    @pytest.mark.asyncio
    async def test_daily_limit_blocks_second_withdrawal(self, pipeline, custody):
        await pipeline.execute("alice", 4_000 * ONE_USDC)

        with pytest.raises(ExceedsDailyWithdrawalLimit):
            await pipeline.execute("alice", 1_001 * ONE_USDC)

        assert pipeline.ledger.balance_of("alice") == 16_000 * ONE_USDC
        assert len(custody.transfers_out) == 1

    @pytest.mark.asyncio
    async def test_failed_transfer_reverts_everything(self, pipeline, custody, sink):
        """A payout failure leaves balances, counters and records untouched."""
        custody.fail_out = True

        with pytest.raises(RuntimeError):
            await pipeline.execute("alice", 1_000 * ONE_USDC)

        assert pipeline.ledger.balance_of("alice") == 20_000 * ONE_USDC
        assert pipeline.ledger.total_balance == 20_000 * ONE_USDC
        assert pipeline.ledger.withdrawal_count == 0
        assert pipeline.risk.daily_status("alice").withdrawals_used == 0
        assert sink.records == []

    @pytest.mark.asyncio
    async def test_cancelled_transfer_reverts_everything(self, pipeline, custody, monkeypatch):
        async def cancelled(*args, **kwargs):
            raise asyncio.CancelledError()

        monkeypatch.setattr(custody, "transfer_out", cancelled)

        with pytest.raises(asyncio.CancelledError):
            await pipeline.execute("alice", 1_000 * ONE_USDC)

        assert pipeline.ledger.balance_of("alice") == 20_000 * ONE_USDC
        assert pipeline.risk.daily_status("alice").withdrawals_used == 0
