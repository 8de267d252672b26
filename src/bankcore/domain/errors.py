"""Error hierarchy raised by the bank core.

Every pipeline step fails closed by raising one of these; none of them is
raised after shared state has been mutated.
"""

from __future__ import annotations


class BankError(RuntimeError):
    """Base class for every rejection raised by the bank core."""

    code = "BANK_ERROR"


class ZeroAmount(BankError):
    """Raised when an operation is requested for a zero amount."""

    code = "ZERO_AMOUNT"

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} amount must be positive")
        self.operation = operation


class TokenNotSupported(BankError):
    """Raised when an asset has no active configuration."""

    code = "TOKEN_NOT_SUPPORTED"

    def __init__(self, asset: str) -> None:
        super().__init__(f"asset {asset!r} is not supported")
        self.asset = asset


class InvalidToken(BankError):
    """Raised when an asset cannot be registered."""

    code = "INVALID_TOKEN"

    def __init__(self, asset: str, reason: str) -> None:
        super().__init__(f"asset {asset!r} is invalid: {reason}")
        self.asset = asset
        self.reason = reason


class TokenAlreadySupported(InvalidToken):
    """Raised when registering an asset that already has a configuration."""

    code = "TOKEN_ALREADY_SUPPORTED"

    def __init__(self, asset: str) -> None:
        super().__init__(asset, "already registered")


class _LimitExceeded(BankError):
    """Shared shape of every limit rejection."""

    limit_name = "limit"

    def __init__(self, requested: int, limit: int) -> None:
        super().__init__(f"{requested} exceeds {self.limit_name} of {limit}")
        self.requested = requested
        self.limit = limit


class ExceedsDepositLimit(_LimitExceeded):
    code = "EXCEEDS_DEPOSIT_LIMIT"
    limit_name = "per-operation deposit limit"


class ExceedsWithdrawalLimit(_LimitExceeded):
    code = "EXCEEDS_WITHDRAWAL_LIMIT"
    limit_name = "per-operation withdrawal limit"


class ExceedsDailyDepositLimit(_LimitExceeded):
    code = "EXCEEDS_DAILY_DEPOSIT_LIMIT"
    limit_name = "daily deposit limit"


class ExceedsDailyWithdrawalLimit(_LimitExceeded):
    code = "EXCEEDS_DAILY_WITHDRAWAL_LIMIT"
    limit_name = "daily withdrawal limit"


class ExceedsBankCap(_LimitExceeded):
    code = "EXCEEDS_BANK_CAP"
    limit_name = "global bank cap"


class InsufficientBalance(BankError):
    """Raised when a withdrawal exceeds the user's ledger balance."""

    code = "INSUFFICIENT_BALANCE"

    def __init__(self, user: str, requested: int, available: int) -> None:
        super().__init__(f"{user} requested {requested} but holds {available}")
        self.user = user
        self.requested = requested
        self.available = available


class SlippageTooHigh(BankError):
    """Raised when a caller's minimum output is outside the accepted band."""

    code = "SLIPPAGE_TOO_HIGH"

    def __init__(self, expected: int, min_output: int) -> None:
        super().__init__(f"minimum output {min_output} is outside tolerance of quote {expected}")
        self.expected = expected
        self.min_output = min_output


class StalePrice(BankError):
    """Raised when a price report or cached snapshot cannot be used."""

    code = "STALE_PRICE"

    def __init__(self, asset: str, reason: str) -> None:
        super().__init__(f"price for {asset!r} unusable: {reason}")
        self.asset = asset
        self.reason = reason


class SwapFailed(BankError):
    """Raised when neither conversion route produced an output."""

    code = "SWAP_FAILED"

    def __init__(self, asset: str, amount: int, detail: str = "") -> None:
        message = f"could not convert {amount} of {asset!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.asset = asset
        self.amount = amount


class SwapShortfall(SwapFailed):
    """Raised when an executed swap delivered less than its floor.

    The input has been spent, so no other route is tried. ``received`` is the
    settlement amount that did arrive in custody.
    """

    code = "SWAP_SHORTFALL"

    def __init__(self, asset: str, amount: int, received: int, floor: int) -> None:
        super().__init__(asset, amount, f"received {received} below floor {floor}")
        self.received = received
        self.floor = floor


class BankHalted(BankError):
    """Raised when the external halt flag refuses new invocations."""

    code = "BANK_HALTED"

    def __init__(self) -> None:
        super().__init__("bank is halted")


class Unauthorized(BankError):
    """Raised when the authorization gate denies an administrative action."""

    code = "UNAUTHORIZED"

    def __init__(self, actor: str, action: str) -> None:
        super().__init__(f"{actor!r} may not {action}")
        self.actor = actor
        self.action = action


__all__ = [
    "BankError",
    "BankHalted",
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
    "TokenAlreadySupported",
    "TokenNotSupported",
    "Unauthorized",
    "ZeroAmount",
]
