"""Per-asset configuration registry."""

from bankcore.registry.tokens import TokenMetadata, TokenRegistry

__all__ = ["TokenMetadata", "TokenRegistry"]
