"""Asset custody capability consumed by the pipelines and the swap router."""

from __future__ import annotations

from typing import Protocol


class AssetTransfer(Protocol):
    """Moves custody of assets between users and the bank.

    Transfers are assumed atomic; any exception they raise is fatal to the
    invoking pipeline.
    """

    async def transfer_in(self, asset: str, sender: str, amount: int) -> None:
        ...

    async def transfer_out(self, asset: str, recipient: str, amount: int) -> None:
        ...

    async def balance_of(self, asset: str) -> int:
        """Amount of ``asset`` currently held by the bank."""
        ...


__all__ = ["AssetTransfer"]
