"""Tests for ledger balance bookkeeping."""

import pytest

from bankcore.domain.errors import InsufficientBalance, ZeroAmount
from bankcore.ledger import Ledger


class TestLedger:
    """Tests for credits, debits and the aggregate total."""

    def test_unknown_user_has_zero_balance(self):
        assert Ledger().balance_of("nobody") == 0

    def test_credit_and_debit_keep_total_in_sync(self):
        ledger = Ledger()
        ledger.credit("alice", 100)
        ledger.credit("bob", 50)
        ledger.debit("alice", 30)

        assert ledger.balance_of("alice") == 70
        assert ledger.total_balance == sum(ledger.balances().values()) == 120
        assert (ledger.deposit_count, ledger.withdrawal_count) == (2, 1)

    def test_overdraft_is_rejected_without_change(self):
        ledger = Ledger()
        ledger.credit("alice", 10)

        with pytest.raises(InsufficientBalance) as excinfo:
            ledger.debit("alice", 11)

        assert excinfo.value.available == 10
        assert ledger.balance_of("alice") == 10
        assert ledger.withdrawal_count == 0

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amounts_are_rejected(self, amount):
        ledger = Ledger()

        with pytest.raises(ZeroAmount):
            ledger.credit("alice", amount)
        with pytest.raises(ZeroAmount):
            ledger.debit("alice", amount)

    def test_revert_debit_restores_balance_and_counts(self):
        ledger = Ledger()
        ledger.credit("alice", 100)
        ledger.debit("alice", 40)

        ledger.revert_debit("alice", 40)

        assert ledger.balance_of("alice") == 100
        assert ledger.total_balance == 100
        assert ledger.withdrawal_count == 0

    def test_balances_view_is_read_only(self):
        ledger = Ledger()
        ledger.credit("alice", 1)

        with pytest.raises(TypeError):
            ledger.balances()["alice"] = 1_000
