"""Cache entry, counters and statistics models."""

from __future__ import annotations

import threading
import time
from typing import Any

from pydantic import BaseModel, Field


class CacheEntry(BaseModel):
    """A cached analysis value."""

    fingerprint: str
    value: Any = None
    analysis_type: str = ""
    created_at: float = Field(default_factory=time.time)
    last_access_at: float = Field(default_factory=time.time)
    access_count: int = 0
    size_bytes: int = 0
    ttl_seconds: float = 3600.0
    embedding: list[float] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    def is_expired(self, now: float | None = None) -> bool:
        now = time.time() if now is None else now
        return now > self.created_at + self.ttl_seconds


class CacheStats(BaseModel):
    """Point-in-time cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    errors: int = 0
    current_size: int = 0
    current_count: int = 0
    strategy: str = ""

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    @property
    def error_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 1.0 if self.errors else 0.0
        return min(1.0, self.errors / total)

    def as_dict(self) -> dict[str, Any]:
        data = self.model_dump()
        data["hit_rate"] = round(self.hit_rate, 4)
        data["error_rate"] = round(self.error_rate, 4)
        return data


class CacheCounters:
    """Hit/miss/eviction/error counters owned by one CacheStore."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0
        self.errors = 0

    def record_hit(self) -> None:
        with self._lock:
            self.hits += 1

    def record_miss(self) -> None:
        with self._lock:
            self.misses += 1

    def record_eviction(self, count: int = 1) -> None:
        with self._lock:
            self.evictions += count

    def record_expiration(self) -> None:
        with self._lock:
            self.expirations += 1

    def record_error(self) -> None:
        with self._lock:
            self.errors += 1

    def reset(self) -> None:
        with self._lock:
            self.hits = self.misses = self.evictions = self.expirations = self.errors = 0

    def snapshot(self, current_size: int, current_count: int) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self.hits,
                misses=self.misses,
                evictions=self.evictions,
                expirations=self.expirations,
                errors=self.errors,
                current_size=current_size,
                current_count=current_count,
            )
