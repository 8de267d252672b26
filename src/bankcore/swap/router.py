"""Swap router converting supported assets into the settlement unit.

Routes are tried in fixed priority order: the three-hop route through the
canonical intermediary first, then the direct pair. An attempt that was never
executed yields a tagged outcome so the fallback decision stays explicit; once
the exchange has executed, a short delivery is terminal because the input is
spent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from structlog import get_logger

from bankcore.domain.assets import Clock, SwapPath, system_clock
from bankcore.domain.custody import AssetTransfer
from bankcore.domain.errors import SlippageTooHigh, SwapFailed, SwapShortfall, ZeroAmount

logger = get_logger(__name__)

BPS_DENOMINATOR = 10_000


class Exchange(Protocol):
    """External exchange quoting and executing multi-hop routes."""

    async def quote(self, path: SwapPath, amount_in: int) -> Sequence[int]:
        """Expected amounts along ``path``; the last entry is the output."""
        ...

    async def execute_swap(
        self,
        path: SwapPath,
        amount_in: int,
        min_out: int,
        deadline: int,
    ) -> int:
        ...


@dataclass(frozen=True, slots=True)
class SwapSuccess:
    """Conversion completed; ``amount`` is the measured settlement delta."""

    amount: int
    path: SwapPath | None = None

    @property
    def executed(self) -> bool:
        return self.path is not None


@dataclass(frozen=True, slots=True)
class NoQuote:
    path: SwapPath
    detail: str = ""


@dataclass(frozen=True, slots=True)
class ExecutionFailed:
    path: SwapPath
    detail: str = ""


SwapOutcome = SwapSuccess | NoQuote | ExecutionFailed


class SwapRouter:
    """Converts an asset amount into the settlement unit with slippage bounds."""

    def __init__(
        self,
        exchange: Exchange,
        custody: AssetTransfer,
        *,
        settlement_asset: str,
        intermediary_asset: str,
        max_slippage_bps: int = 300,
        deadline_seconds: int = 300,
        clock: Clock = system_clock,
    ) -> None:
        self._exchange = exchange
        self._custody = custody
        self.settlement_asset = settlement_asset
        self.intermediary_asset = intermediary_asset
        self.max_slippage_bps = max_slippage_bps
        self.deadline_seconds = deadline_seconds
        self._clock = clock

    def candidate_paths(self, asset: str) -> list[SwapPath]:
        """Routes to try for ``asset``, highest priority first."""

        direct: SwapPath = (asset, self.settlement_asset)
        if asset in (self.intermediary_asset, self.settlement_asset):
            return [direct]
        return [(asset, self.intermediary_asset, self.settlement_asset), direct]

    def execution_floor(self, expected: int, min_output: int) -> int:
        """Validate ``min_output`` against a quote and return the execution minimum.

        A zero ``min_output`` delegates the floor to the maximum tolerated
        slippage below the quote.
        """

        if min_output > expected:
            raise SlippageTooHigh(expected, min_output)
        if min_output == 0:
            return expected * (BPS_DENOMINATOR - self.max_slippage_bps) // BPS_DENOMINATOR
        if (expected - min_output) * BPS_DENOMINATOR > self.max_slippage_bps * expected:
            raise SlippageTooHigh(expected, min_output)
        return min_output

    async def quote_path(self, path: SwapPath, amount: int) -> int | None:
        """Expected settlement output for ``path``, or None when unobtainable."""

        try:
            amounts = await self._exchange.quote(path, amount)
        except Exception as exc:
            logger.warning("swap_quote_failed", path=list(path), amount=amount, error=str(exc))
            return None
        if not amounts or amounts[-1] <= 0:
            logger.warning("swap_quote_empty", path=list(path), amount=amount)
            return None
        return int(amounts[-1])

    async def try_path(
        self,
        path: SwapPath,
        amount: int,
        min_output: int,
        deadline: int,
    ) -> SwapOutcome:
        """Quote, validate and execute a single route.

        Raises ``SwapShortfall`` when the exchange executed but the measured
        settlement delta is below the floor.
        """

        expected = await self.quote_path(path, amount)
        if expected is None:
            return NoQuote(path, "quote unavailable")

        floor = self.execution_floor(expected, min_output)
        before = await self._custody.balance_of(self.settlement_asset)
        try:
            reported = await self._exchange.execute_swap(path, amount, floor, deadline)
        except Exception as exc:
            logger.warning("swap_execution_failed", path=list(path), amount=amount, error=str(exc))
            return ExecutionFailed(path, str(exc))
        after = await self._custody.balance_of(self.settlement_asset)

        received = after - before
        if received <= 0 or received < floor:
            logger.warning(
                "swap_output_below_floor",
                path=list(path),
                received=received,
                floor=floor,
                reported=reported,
            )
            raise SwapShortfall(path[0], amount, received, floor)
        if reported != received:
            logger.warning(
                "swap_reported_amount_mismatch",
                path=list(path),
                reported=reported,
                received=received,
            )
        return SwapSuccess(amount=received, path=path)

    async def route(self, asset: str, amount: int, min_output: int) -> SwapSuccess:
        """Convert ``amount`` of ``asset`` and report which route produced it."""

        if amount <= 0:
            raise ZeroAmount("conversion")
        if asset == self.settlement_asset:
            if min_output > amount:
                raise SlippageTooHigh(amount, min_output)
            return SwapSuccess(amount=amount)

        deadline = self._clock() + self.deadline_seconds
        failures: list[str] = []
        for path in self.candidate_paths(asset):
            outcome = await self.try_path(path, amount, min_output, deadline)
            if isinstance(outcome, SwapSuccess):
                logger.info(
                    "swap_completed",
                    asset=asset,
                    amount_in=amount,
                    amount_out=outcome.amount,
                    path=list(path),
                )
                return outcome
            failures.append(f"{'->'.join(path)}: {outcome.detail}")

        raise SwapFailed(asset, amount, "; ".join(failures))

    async def convert(self, asset: str, amount: int, min_output: int) -> int:
        """Convert and return the settlement-unit output amount."""

        return (await self.route(asset, amount, min_output)).amount

    async def estimate_output(self, asset: str, amount: int) -> int:
        """Mirror the route selection on quotes only; zero when nothing quotes."""

        if amount <= 0:
            return 0
        if asset == self.settlement_asset:
            return amount
        for path in self.candidate_paths(asset):
            expected = await self.quote_path(path, amount)
            if expected is not None:
                return expected
        return 0


__all__ = [
    "BPS_DENOMINATOR",
    "Exchange",
    "ExecutionFailed",
    "NoQuote",
    "SwapOutcome",
    "SwapRouter",
    "SwapSuccess",
]
