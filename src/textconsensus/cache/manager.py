"""Cache manager: the orchestration-facing cache over a strategy and store."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from textconsensus.cache.embeddings import EmbeddingFunction
from textconsensus.cache.keys import KeyFingerprinter
from textconsensus.cache.memory import CacheStore
from textconsensus.cache.stats import CacheStats
from textconsensus.cache.strategies import MatchStrategy, create_strategy
from textconsensus.config.schema import CacheConfig
from textconsensus.errors.exceptions import CacheOperationError
from textconsensus.types import AnalysisRequest

logger = logging.getLogger(__name__)

# Error rate above which health() reports the cache as degraded
_DEGRADED_ERROR_RATE = 0.1


class CacheManager:
    """Fingerprint → strategy → store. Failures degrade to misses.

    Example:
        ```python
        cache = CacheManager(CacheConfig(strategy="semantic"), embedding_function=my_model)
        value = cache.lookup(request)
        if value is None:
            value = compute(request)
            cache.store(request, value)
        ```
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        embedding_function: EmbeddingFunction | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or CacheConfig()
        self._fingerprinter = KeyFingerprinter(
            tag=self._config.strategy.value,
            volatile_fields=self._config.volatile_fields,
            ordered_fields=self._config.ordered_fields,
        )
        self._strategy: MatchStrategy = create_strategy(
            self._config.strategy,
            similarity_threshold=self._config.similarity_threshold,
            embedding_function=embedding_function,
        )
        self._store = CacheStore(
            max_entry_count=self._config.max_entry_count,
            max_size_bytes=self._config.max_size_bytes,
            ttl_seconds=self._config.ttl_seconds,
            clock=clock,
        )

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def strategy(self) -> MatchStrategy:
        return self._strategy

    @property
    def fingerprinter(self) -> KeyFingerprinter:
        return self._fingerprinter

    def fingerprint(self, request: AnalysisRequest) -> str:
        return self._fingerprinter.fingerprint(request)

    def lookup(self, request: AnalysisRequest) -> Any | None:
        """Return the cached value for ``request``, or None on a miss."""
        try:
            fingerprint = self._fingerprinter.fingerprint(request)
            entry = self._strategy.lookup(self._store, fingerprint, request)
        except CacheOperationError as exc:
            logger.warning("Cache lookup degraded to miss (%s): %s", exc.stage, exc.message)
            self._store.counters.record_error()
            self._store.counters.record_miss()
            return None
        return entry.value if entry is not None else None

    def store(
        self,
        request: AnalysisRequest,
        value: Any,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """Cache ``value`` for ``request``. Returns False when nothing was stored."""
        try:
            fingerprint = self._fingerprinter.fingerprint(request)
            size = estimate_size(value)
            return self._strategy.store(
                self._store, fingerprint, request, value, size, metadata=metadata
            )
        except CacheOperationError as exc:
            logger.warning("Cache store skipped (%s): %s", exc.stage, exc.message)
            self._store.counters.record_error()
            return False

    def invalidate(self, pattern: str | None = None) -> int:
        """Drop entries whose fingerprint contains ``pattern``; all when None."""
        if not pattern:
            return self._store.invalidate()
        return self._store.invalidate(lambda entry: pattern in entry.fingerprint)

    def invalidate_on_event(self, event: str) -> bool:
        """Clear everything if ``event`` is one of the configured triggers."""
        if event in self._config.invalidate_on:
            count = self._store.invalidate()
            logger.info("Cache invalidated on event '%s' (%d entries)", event, count)
            return True
        return False

    def stats(self) -> CacheStats:
        stats = self._store.stats()
        stats.strategy = self._strategy.name.value
        return stats

    def entries(self) -> list[dict[str, Any]]:
        """Live entries as (fingerprint, hits, age, size), most hit first."""
        now = self._store.now()
        rows = [
            {
                "fingerprint": e.fingerprint,
                "hits": e.access_count,
                "age_seconds": now - e.created_at,
                "size_bytes": e.size_bytes,
            }
            for e in self._store.entries()
        ]
        return sorted(rows, key=lambda row: row["hits"], reverse=True)

    def optimize(self) -> int:
        """Remove cold entries: below half the mean hits and older than half the TTL."""
        rows = self.entries()
        if not rows:
            return 0
        average_hits = sum(row["hits"] for row in rows) / len(rows)
        half_ttl = self._config.ttl_seconds * 0.5
        cold = {
            row["fingerprint"]
            for row in rows
            if row["hits"] < average_hits * 0.5 and row["age_seconds"] > half_ttl
        }
        if not cold:
            return 0
        return self._store.invalidate(lambda entry: entry.fingerprint in cold)

    def export(self) -> list[dict[str, Any]]:
        """Dump live entries as plain data (fingerprint, value, metadata)."""
        return [
            {
                "fingerprint": e.fingerprint,
                "value": e.value,
                "analysis_type": e.analysis_type,
                "embedding": e.embedding,
                "metadata": e.metadata,
            }
            for e in self._store.entries()
        ]

    def import_entries(self, data: list[dict[str, Any]]) -> int:
        """Re-insert exported entries with fresh timestamps. Returns count stored."""
        count = 0
        for item in data:
            stored = self._store.put(
                item["fingerprint"],
                item.get("value"),
                estimate_size(item.get("value")),
                analysis_type=item.get("analysis_type", ""),
                embedding=item.get("embedding"),
                metadata=item.get("metadata"),
            )
            count += int(stored)
        return count

    def clear(self) -> None:
        """Clear all entries and reset counters."""
        self._store.clear()
        self._store.counters.reset()

    def health(self) -> dict[str, Any]:
        stats = self.stats()
        if stats.error_rate > _DEGRADED_ERROR_RATE:
            return {
                "status": "degraded",
                "message": "High cache error rate",
                "recommendation": "Clear cache or increase cache size",
            }
        return {"status": "healthy", "message": ""}

    def __len__(self) -> int:
        return len(self._store)


def estimate_size(value: Any) -> int:
    """Approximate byte size of a value via its JSON serialization."""
    if hasattr(value, "model_dump_json"):
        return len(value.model_dump_json().encode("utf-8"))
    try:
        return len(json.dumps(value, default=str).encode("utf-8"))
    except (TypeError, ValueError) as exc:
        raise CacheOperationError(
            f"Cannot size value: {exc}", stage="size", original=exc
        ) from exc
