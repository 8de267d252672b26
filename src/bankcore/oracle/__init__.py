"""Price oracle adapter and price source implementations."""

from bankcore.oracle.adapter import (
    PriceOracleAdapter,
    PriceReport,
    PriceSource,
    normalize_amount,
)
from bankcore.oracle.http_source import HttpPriceSource, PriceSourceError

__all__ = [
    "HttpPriceSource",
    "PriceOracleAdapter",
    "PriceReport",
    "PriceSource",
    "PriceSourceError",
    "normalize_amount",
]
