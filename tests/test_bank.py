"""End-to-end tests for the bank facade."""

from __future__ import annotations

import asyncio

import pytest

from bankcore.bank import Bank, BankStats
from bankcore.domain.errors import (
    BankHalted,
    ExceedsBankCap,
    InsufficientBalance,
    StalePrice,
    SwapShortfall,
    TokenAlreadySupported,
    TokenNotSupported,
    Unauthorized,
)
from bankcore.oracle import HttpPriceSource
from fakes import LINK, LINK_FEED, NATIVE, ONE_LINK, ONE_USDC, USDC, WETH


class TestEndToEnd:
    """Tests covering deposit and withdrawal through the facade."""

    @pytest.mark.asyncio
    async def test_swap_deposit_then_full_withdrawal(self, link_bank, custody, sink):
        """Credit equals the measured delta and a full withdrawal zeroes the balance."""
        record = await link_bank.deposit("alice", LINK, ONE_LINK)

        credited = record.settlement_amount
        assert credited == 150 * ONE_USDC
        assert link_bank.balance_of("alice") == credited
        assert link_bank.stats().total_balance == credited

        await link_bank.withdraw("alice", credited)

        assert link_bank.balance_of("alice") == 0
        assert link_bank.stats().total_balance == 0
        assert custody.transfers_out == [(USDC, "alice", credited)]
        assert [r.event_type.value for r in sink.records] == ["deposit", "withdrawal"]

    @pytest.mark.asyncio
    async def test_total_matches_sum_of_balances(self, link_bank):
        await link_bank.deposit("alice", USDC, 1_000 * ONE_USDC)
        await link_bank.deposit("bob", LINK, ONE_LINK)
        await link_bank.withdraw("alice", 250 * ONE_USDC)

        stats = link_bank.stats()
        assert stats.total_balance == link_bank.balance_of("alice") + link_bank.balance_of("bob")
        assert stats == BankStats(
            total_balance=900 * ONE_USDC,
            global_cap=100_000 * ONE_USDC,
            available_capacity=99_100 * ONE_USDC,
            deposit_count=2,
            withdrawal_count=1,
            user_count=2,
        )

    @pytest.mark.asyncio
    async def test_native_asset_deposit(self, bank, exchange, custody):
        exchange.quotes[(NATIVE, WETH, USDC)] = 2_000 * ONE_USDC

        record = await bank.deposit("alice", NATIVE, 10**18)

        assert record.settlement_amount == 2_000 * ONE_USDC
        assert custody.transfers_in == [(NATIVE, "alice", 10**18)]

    @pytest.mark.asyncio
    async def test_concurrent_deposits_are_serialized(self, bank):
        await asyncio.gather(*(bank.deposit(f"user{i}", USDC, 100 * ONE_USDC) for i in range(10)))

        assert bank.stats().total_balance == 1_000 * ONE_USDC
        assert bank.stats().deposit_count == 10


class TestRejections:
    """Tests for failures that leave the ledger untouched."""

    @pytest.mark.asyncio
    async def test_cap_breach_leaves_state_unchanged(
        self, settings, price_source, exchange, custody, metadata, sink, clock
    ):
        settings.limits.global_cap = 1_000
        bank = Bank(
            settings=settings,
            price_source=price_source,
            exchange=exchange,
            custody=custody,
            metadata=metadata,
            events=sink,
            clock=clock,
        )
        await bank.deposit("alice", USDC, 900 * ONE_USDC)

        with pytest.raises(ExceedsBankCap):
            await bank.deposit("bob", USDC, 101 * ONE_USDC)

        assert bank.stats().total_balance == 900 * ONE_USDC
        assert bank.balance_of("bob") == 0
        assert bank.daily_status("bob").deposits_used == 0
        assert len(sink.records) == 1

    @pytest.mark.asyncio
    async def test_overdraft_is_rejected(self, bank):
        await bank.deposit("alice", USDC, 10 * ONE_USDC)

        with pytest.raises(InsufficientBalance):
            await bank.withdraw("alice", 10 * ONE_USDC + 1)
        assert bank.balance_of("alice") == 10 * ONE_USDC

    @pytest.mark.asyncio
    async def test_unsupported_asset_is_rejected(self, bank):
        with pytest.raises(TokenNotSupported):
            await bank.deposit("alice", LINK, ONE_LINK)

    @pytest.mark.asyncio
    async def test_halt_refuses_new_invocations(self, bank, halt, custody):
        halt.halted = True

        with pytest.raises(BankHalted):
            await bank.deposit("alice", USDC, ONE_USDC)
        with pytest.raises(BankHalted):
            await bank.withdraw("alice", ONE_USDC)
        assert custody.transfers_in == []

        halt.halted = False
        await bank.deposit("alice", USDC, ONE_USDC)


    @pytest.mark.asyncio
    async def test_short_swap_keeps_custody_matching_ledger(self, link_bank, exchange, custody):
        """Other users' custody is untouched and held settlement equals the ledger total."""
        custody.holdings[LINK] += 5 * ONE_LINK
        await link_bank.deposit("bob", LINK, ONE_LINK)
        exchange.enforce_min_out = False
        exchange.delivered[(LINK, WETH, USDC)] = 100 * ONE_USDC

        with pytest.raises(SwapShortfall):
            await link_bank.deposit("alice", LINK, ONE_LINK, 0)

        assert custody.holdings[LINK] == 5 * ONE_LINK
        assert custody.holdings[USDC] == link_bank.stats().total_balance == 150 * ONE_USDC
        assert link_bank.balance_of("alice") == 0


class TestAdministration:
    """Tests for token registration and limit updates."""

    @pytest.mark.asyncio
    async def test_unauthorized_actor_cannot_register(self, bank):
        with pytest.raises(Unauthorized):
            await bank.register_token("mallory", LINK, ONE_LINK, ONE_LINK)
        assert not bank.is_supported(LINK)

    @pytest.mark.asyncio
    async def test_missing_authorizer_allows_admin_actions(
        self, settings, price_source, exchange, custody, metadata, clock
    ):
        bank = Bank(
            settings=settings,
            price_source=price_source,
            exchange=exchange,
            custody=custody,
            metadata=metadata,
            clock=clock,
        )

        config = await bank.register_token("anyone", LINK, ONE_LINK, ONE_LINK, LINK_FEED)

        assert config.asset == LINK

    @pytest.mark.asyncio
    async def test_duplicate_registration_fails(self, link_bank):
        with pytest.raises(TokenAlreadySupported):
            await link_bank.register_token("admin", LINK, ONE_LINK, ONE_LINK)

    @pytest.mark.asyncio
    async def test_update_limits(self, link_bank):
        updated = await link_bank.update_limits("admin", LINK, ONE_LINK, 2 * ONE_LINK)

        assert updated.deposit_limit == 2 * ONE_LINK
        assert link_bank.token_config(LINK).withdrawal_limit == ONE_LINK

    @pytest.mark.asyncio
    async def test_update_limits_requires_authorization(self, link_bank):
        with pytest.raises(Unauthorized):
            await link_bank.update_limits("mallory", LINK, 1, 1)

    @pytest.mark.asyncio
    async def test_token_config_is_a_copy(self, link_bank):
        link_bank.token_config(LINK).deposit_limit = 0

        assert link_bank.token_config(LINK).deposit_limit == 1_000 * ONE_LINK

    def test_token_config_of_unknown_asset(self, bank):
        with pytest.raises(TokenNotSupported):
            bank.token_config("DOGE")


class TestQueries:
    """Tests for read-only helpers."""

    @pytest.mark.asyncio
    async def test_usd_value_uses_cached_price(self, link_bank):
        assert link_bank.usd_value(LINK, 2 * ONE_LINK) == 30 * 10**18

    def test_usd_value_of_settlement_without_feed_is_zero(self, bank):
        assert bank.usd_value(USDC, ONE_USDC) == 0

    @pytest.mark.asyncio
    async def test_usd_value_with_expired_price(self, link_bank, clock):
        clock.advance(13 * 60 * 60)

        with pytest.raises(StalePrice):
            link_bank.usd_value(LINK, ONE_LINK)

    @pytest.mark.asyncio
    async def test_refresh_price(self, link_bank, price_source, clock):
        price_source.set_price(LINK_FEED, 20 * 10**8, updated_at=clock())

        assert await link_bank.refresh_price(LINK) is True
        assert link_bank.token_config(LINK).last_price == 20 * 10**8

    @pytest.mark.asyncio
    async def test_estimate_output(self, link_bank, exchange):
        assert await link_bank.estimate_output(LINK, ONE_LINK) == 150 * ONE_USDC
        assert exchange.executions == []

    @pytest.mark.asyncio
    async def test_estimate_output_for_unsupported_asset(self, bank):
        with pytest.raises(TokenNotSupported):
            await bank.estimate_output("DOGE", 1)

    @pytest.mark.asyncio
    async def test_daily_status(self, bank):
        await bank.deposit("alice", USDC, 1_000 * ONE_USDC)

        status = bank.daily_status("alice")

        assert status.deposits_used == 1_000 * ONE_USDC
        assert status.deposits_remaining == 9_000 * ONE_USDC


class TestConstruction:
    """Tests for building the bank from settings."""

    @pytest.mark.asyncio
    async def test_from_settings_seeds_reserved_assets(
        self, settings, price_source, exchange, custody, metadata, sink, clock
    ):
        bank = Bank.from_settings(
            settings,
            price_source=price_source,
            exchange=exchange,
            custody=custody,
            metadata=metadata,
            events=sink,
            clock=clock,
        )

        assert bank.token_config(USDC).deposit_limit == 10_000 * ONE_USDC
        assert bank.token_config(USDC).withdrawal_limit == 5_000 * ONE_USDC
        assert bank.token_config(NATIVE).price_feed == settings.assets.native_price_feed
        assert bank.is_supported(NATIVE)
        assert not bank.is_supported(LINK)

    def test_from_settings_builds_http_price_source(self, settings, exchange, custody, metadata):
        settings.oracle.price_source_url = "https://oracle.test"

        bank = Bank.from_settings(settings, exchange=exchange, custody=custody, metadata=metadata)

        assert isinstance(bank._oracle._source, HttpPriceSource)
