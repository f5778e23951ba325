"""Custom exception hierarchy for textconsensus."""

from __future__ import annotations

from typing import Any


class TextConsensusError(Exception):
    """Base exception for all textconsensus errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(TextConsensusError):
    """Invalid configuration: fail fast at construction.

    Examples: unknown strategy/method name, out-of-range weight, empty provider list.
    """

    def __init__(self, message: str = "", field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class CacheOperationError(TextConsensusError):
    """Fingerprint or embedding computation failed.

    Never propagated past the cache manager: it degrades to a miss.
    """

    def __init__(
        self,
        message: str = "",
        stage: str = "fingerprint",
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.original = original


class ProviderFailure(TextConsensusError):
    """A single provider failed: it is excluded from aggregation."""

    def __init__(
        self,
        message: str = "",
        provider_id: str = "",
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.provider_id = provider_id
        self.original = original


class AllProvidersFailed(TextConsensusError):
    """Terminal: no provider returned usable data."""

    def __init__(
        self,
        message: str = "All providers failed to analyze content",
        failures: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.failures = failures or {}
