"""Concurrent fan-out to analysis providers with consensus fan-in."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from textconsensus.cache.manager import CacheManager
from textconsensus.config.schema import ConsensusConfig
from textconsensus.consensus.engine import ConsensusAggregator, check_weight
from textconsensus.errors.exceptions import AllProvidersFailed, ConfigurationError, ProviderFailure
from textconsensus.providers.base import ProviderInvoker
from textconsensus.types import (
    AnalysisRequest,
    ConsensusMethod,
    ConsensusOutcome,
    ProviderResult,
    ProviderStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class ProviderSpec:
    invoker: ProviderInvoker
    weight: float = 1.0

    @property
    def provider_id(self) -> str:
        return self.invoker.provider_id


@dataclass
class _ProviderStats:
    calls: int = 0
    failures: int = 0
    total_latency_ms: float = 0.0
    last_error: str | None = field(default=None)


class ConsensusAnalyzer:
    """Run every provider concurrently and merge what comes back.

    All invocations start together and the analyzer waits for every one to
    finish or fail; there is no per-call timeout, so a hung provider stalls
    the call. Wrap slow providers in your own timeout.
    """

    def __init__(
        self,
        providers: Sequence[ProviderSpec],
        config: ConsensusConfig | None = None,
        cache: CacheManager | None = None,
    ) -> None:
        if not providers:
            raise ConfigurationError("At least one provider is required", field="providers")
        ids = [spec.provider_id for spec in providers]
        if len(set(ids)) != len(ids):
            raise ConfigurationError(f"Duplicate provider ids: {ids}", field="providers")
        for spec in providers:
            check_weight(spec.provider_id, spec.weight)

        self._providers = list(providers)
        self._aggregator = ConsensusAggregator(config)
        self._cache = cache
        self._stats = {spec.provider_id: _ProviderStats() for spec in providers}

    @property
    def config(self) -> ConsensusConfig:
        return self._aggregator.config

    async def analyze(
        self,
        request: AnalysisRequest,
        provider_weights: dict[str, float] | None = None,
        config: ConsensusConfig | None = None,
    ) -> ConsensusOutcome:
        """Fan out ``request``, fan in, and aggregate.

        Raises AllProvidersFailed when no provider succeeds.
        """
        config = config or self._aggregator.config
        weights = self._resolve_weights(provider_weights)
        cache_request = _cache_request(request, config, weights)

        if self._cache is not None:
            cached = self._cache.lookup(cache_request)
            if cached is not None:
                logger.debug("Consensus cache hit for '%s'", request.type)
                outcome = ConsensusOutcome.model_validate(cached)
                outcome.cached = True
                return outcome

        tasks = [self._invoke(spec, request) for spec in self._providers]
        raw = await asyncio.gather(*tasks, return_exceptions=True)

        results: list[ProviderResult] = []
        for spec, item in zip(self._providers, raw):
            if isinstance(item, BaseException) and not isinstance(item, Exception):
                raise item
            results.append(self._to_result(spec, item, weights[spec.provider_id]))

        try:
            outcome = self._aggregator.combine(results, config)
        except AllProvidersFailed as exc:
            logger.error("All %d providers failed: %s", len(results), exc.failures)
            raise

        if self._cache is not None:
            self._cache.store(cache_request, outcome.model_dump(mode="json"))
        return outcome

    async def analyze_with_method(
        self,
        request: AnalysisRequest,
        method: ConsensusMethod | str,
    ) -> ConsensusOutcome:
        """Analyze once with a different consensus method."""
        try:
            chosen = ConsensusMethod(method)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown consensus method '{method}'", field="method") from exc
        config = self._aggregator.config.model_copy(update={"method": chosen})
        return await self.analyze(request, config=config)

    def provider_stats(self) -> list[dict[str, object]]:
        rows = []
        for spec in self._providers:
            stats = self._stats[spec.provider_id]
            rows.append({
                "provider_id": spec.provider_id,
                "weight": spec.weight,
                "calls": stats.calls,
                "failures": stats.failures,
                "avg_latency_ms": stats.total_latency_ms / stats.calls if stats.calls else 0.0,
                "last_error": stats.last_error,
            })
        return rows

    async def _invoke(self, spec: ProviderSpec, request: AnalysisRequest) -> ProviderResult:
        stats = self._stats[spec.provider_id]
        start = time.monotonic()
        try:
            result = await spec.invoker.invoke(request)
        finally:
            elapsed_ms = (time.monotonic() - start) * 1000
            stats.calls += 1
            stats.total_latency_ms += elapsed_ms
        return result.model_copy(update={"latency_ms": result.latency_ms or elapsed_ms})

    def _to_result(
        self,
        spec: ProviderSpec,
        item: ProviderResult | Exception,
        weight: float,
    ) -> ProviderResult:
        stats = self._stats[spec.provider_id]
        if isinstance(item, Exception):
            failure = item if isinstance(item, ProviderFailure) else ProviderFailure(
                str(item) or type(item).__name__,
                provider_id=spec.provider_id,
                original=item,
            )
            logger.warning("Provider %s failed: %s", spec.provider_id, failure.message)
            stats.failures += 1
            stats.last_error = failure.message
            return ProviderResult(
                provider_id=spec.provider_id,
                weight=weight,
                status=ProviderStatus.FAILURE,
                error=failure.message,
            )

        if not item.succeeded:
            logger.warning("Provider %s reported failure: %s", spec.provider_id, item.error)
            stats.failures += 1
            stats.last_error = item.error
        return item.model_copy(update={"provider_id": spec.provider_id, "weight": weight})

    def _resolve_weights(self, overrides: dict[str, float] | None) -> dict[str, float]:
        weights = {spec.provider_id: spec.weight for spec in self._providers}
        for provider_id, weight in (overrides or {}).items():
            if provider_id not in weights:
                raise ConfigurationError(f"Unknown provider '{provider_id}'", field="weights")
            check_weight(provider_id, weight)
            weights[provider_id] = weight
        return weights


def _cache_request(
    request: AnalysisRequest,
    config: ConsensusConfig,
    weights: dict[str, float],
) -> AnalysisRequest:
    """Fold the consensus settings into the request so they key the cache."""
    consensus = {
        "method": config.method.value,
        "require_agreement": config.require_agreement,
        "conflict_resolution": config.conflict_resolution.value,
        "weights": weights,
    }
    return request.model_copy(update={"options": {**request.options, "consensus": consensus}})
