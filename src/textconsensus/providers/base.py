"""Provider invoker protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from textconsensus.types import AnalysisRequest, ProviderResult


@runtime_checkable
class ProviderInvoker(Protocol):
    """An independent analysis backend.

    ``invoke`` may be awaited concurrently with other invocations. It either
    returns a ProviderResult (status success or failure) or raises; a raised
    exception is treated as a provider failure.
    """

    @property
    def provider_id(self) -> str:
        ...

    async def invoke(self, request: AnalysisRequest) -> ProviderResult:
        ...
