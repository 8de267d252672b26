"""HTTP price source reading feed answers from a REST oracle gateway."""

from __future__ import annotations

from typing import Any

import httpx
from structlog import get_logger

from bankcore.oracle.adapter import PriceReport

logger = get_logger(__name__)


class PriceSourceError(RuntimeError):
    """Raised when the gateway cannot produce a usable feed answer."""


class HttpPriceSource:
    """Price source backed by a REST gateway.

    Endpoints:
        ``GET {base_url}/feeds/{feed}/latest`` -> ``{"price": int, "updated_at": int}``
        ``GET {base_url}/feeds/{feed}`` -> ``{"decimals": int}``

    Every request is a single attempt; the oracle adapter decides what a
    failure means.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._client_provided = client is not None
        self._decimals: dict[str, int] = {}

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Dispose the HTTP client if owned by the source."""

        if self._client is not None and not self._client_provided:
            await self._client.aclose()
        self._client = None

    async def get_latest_price(self, feed: str) -> PriceReport:
        payload = await self._get_json(f"/feeds/{feed}/latest")
        try:
            return PriceReport(price=int(payload["price"]), updated_at=int(payload["updated_at"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise PriceSourceError(f"malformed answer for feed {feed}: {payload!r}") from exc

    async def price_decimals(self, feed: str) -> int:
        cached = self._decimals.get(feed)
        if cached is not None:
            return cached
        payload = await self._get_json(f"/feeds/{feed}")
        try:
            decimals = int(payload["decimals"])
        except (KeyError, TypeError, ValueError) as exc:
            raise PriceSourceError(f"malformed metadata for feed {feed}: {payload!r}") from exc
        self._decimals[feed] = decimals
        return decimals

    async def _get_json(self, path: str) -> dict[str, Any]:
        client = await self._ensure_client()
        url = f"{self.base_url}{path}"
        try:
            response = await client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            logger.warning("price_source_request_failed", url=url, error=str(exc))
            raise PriceSourceError(f"request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise PriceSourceError(f"non-JSON response from {url}") from exc

        if not isinstance(data, dict):
            raise PriceSourceError(f"unexpected payload from {url}: {data!r}")
        return data


__all__ = ["HttpPriceSource", "PriceSourceError"]
