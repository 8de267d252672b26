"""Deposit and withdrawal pipelines, the only ledger mutators."""

from bankcore.pipeline.deposit import DepositContext, DepositPipeline, DepositState
from bankcore.pipeline.withdrawal import WithdrawalPipeline

__all__ = [
    "DepositContext",
    "DepositPipeline",
    "DepositState",
    "WithdrawalPipeline",
]
