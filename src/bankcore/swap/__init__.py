"""Conversion of supported assets into the settlement unit."""

from bankcore.swap.router import (
    Exchange,
    ExecutionFailed,
    NoQuote,
    SwapOutcome,
    SwapRouter,
    SwapSuccess,
)

__all__ = [
    "Exchange",
    "ExecutionFailed",
    "NoQuote",
    "SwapOutcome",
    "SwapRouter",
    "SwapSuccess",
]
