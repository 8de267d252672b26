"""Domain models shared across components."""

from .assets import Clock, SwapPath, TokenConfig, day_index, system_clock
from .custody import AssetTransfer
from .errors import (
    BankError,
    BankHalted,
    ExceedsBankCap,
    ExceedsDailyDepositLimit,
    ExceedsDailyWithdrawalLimit,
    ExceedsDepositLimit,
    ExceedsWithdrawalLimit,
    InsufficientBalance,
    InvalidToken,
    SlippageTooHigh,
    StalePrice,
    SwapFailed,
    SwapShortfall,
    TokenAlreadySupported,
    TokenNotSupported,
    Unauthorized,
    ZeroAmount,
)

__all__ = [
    "AssetTransfer",
    "BankError",
    "BankHalted",
    "Clock",
    "ExceedsBankCap",
    "ExceedsDailyDepositLimit",
    "ExceedsDailyWithdrawalLimit",
    "ExceedsDepositLimit",
    "ExceedsWithdrawalLimit",
    "InsufficientBalance",
    "InvalidToken",
    "SlippageTooHigh",
    "StalePrice",
    "SwapFailed",
    "SwapShortfall",
    "SwapPath",
    "TokenAlreadySupported",
    "TokenConfig",
    "TokenNotSupported",
    "Unauthorized",
    "ZeroAmount",
    "day_index",
    "system_clock",
]
