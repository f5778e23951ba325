"""Error handling: exception hierarchy for cache and consensus."""

from textconsensus.errors.exceptions import (
    AllProvidersFailed,
    CacheOperationError,
    ConfigurationError,
    ProviderFailure,
    TextConsensusError,
)

__all__ = [
    "TextConsensusError",
    "ConfigurationError",
    "CacheOperationError",
    "ProviderFailure",
    "AllProvidersFailed",
]
