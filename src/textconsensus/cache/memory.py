"""In-memory LRU store with count/size caps and lazy TTL."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from textconsensus.cache.stats import CacheCounters, CacheEntry, CacheStats

logger = logging.getLogger(__name__)

_DEFAULT_MAX_ENTRIES = 1000
_DEFAULT_MAX_SIZE_BYTES = 100 * 1024 * 1024
_DEFAULT_TTL_SECONDS = 3600.0


class CacheStore:
    """Thread-safe LRU store bounded by entry count and total size.

    The OrderedDict is kept in ``last_access_at`` order: the first item is
    the least recently used. All mutation happens under a single lock.
    """

    def __init__(
        self,
        max_entry_count: int = _DEFAULT_MAX_ENTRIES,
        max_size_bytes: int = _DEFAULT_MAX_SIZE_BYTES,
        ttl_seconds: float = _DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_entry_count = max_entry_count
        self._max_size_bytes = max_size_bytes
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._current_size_bytes = 0
        self._lock = threading.RLock()
        self.counters = CacheCounters()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    @property
    def max_entry_count(self) -> int:
        return self._max_entry_count

    @property
    def max_size_bytes(self) -> int:
        return self._max_size_bytes

    def now(self) -> float:
        return self._clock()

    def get(self, fingerprint: str) -> CacheEntry | None:
        """Return the live entry and mark it most recently used."""
        with self._lock:
            entry = self._live(fingerprint)
            if entry is None:
                return None
            self._touch(fingerprint, entry)
            return entry

    def peek(self, fingerprint: str) -> CacheEntry | None:
        """Return the live entry without touching LRU order."""
        with self._lock:
            return self._live(fingerprint)

    def put(
        self,
        fingerprint: str,
        value: Any,
        size_hint: int,
        analysis_type: str = "",
        embedding: list[float] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """Insert or replace an entry. Returns False if it can never fit."""
        with self._lock:
            if fingerprint in self._store:
                self._remove(fingerprint)

            if size_hint > self._max_size_bytes:
                logger.debug(
                    "Rejecting %s: %d bytes exceeds cap of %d",
                    fingerprint,
                    size_hint,
                    self._max_size_bytes,
                )
                self.counters.record_eviction()
                return False

            evicted = 0
            while self._store and (
                len(self._store) + 1 > self._max_entry_count
                or self._current_size_bytes + size_hint > self._max_size_bytes
            ):
                self._evict_oldest()
                evicted += 1
            if evicted:
                self.counters.record_eviction(evicted)
                logger.debug("Evicted %d entries to fit %s", evicted, fingerprint)

            now = self._clock()
            self._store[fingerprint] = CacheEntry(
                fingerprint=fingerprint,
                value=value,
                analysis_type=analysis_type,
                created_at=now,
                last_access_at=now,
                size_bytes=size_hint,
                ttl_seconds=self._ttl_seconds,
                embedding=embedding,
                metadata=metadata or {},
            )
            self._current_size_bytes += size_hint
            return True

    def invalidate(self, predicate: Callable[[CacheEntry], bool] | None = None) -> int:
        """Remove entries matching ``predicate`` (all when None). Returns count."""
        with self._lock:
            if predicate is None:
                count = len(self._store)
                self._store.clear()
                self._current_size_bytes = 0
                return count
            to_remove = [key for key, entry in self._store.items() if predicate(entry)]
            for key in to_remove:
                self._remove(key)
            return len(to_remove)

    def entries(self) -> list[CacheEntry]:
        """Snapshot of live entries, least recently used first."""
        with self._lock:
            now = self._clock()
            return [e.model_copy() for e in self._store.values() if not e.is_expired(now)]

    def touch(self, fingerprint: str) -> CacheEntry | None:
        """Mark a live entry as accessed (used by similarity matches)."""
        return self.get(fingerprint)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._current_size_bytes = 0

    def stats(self) -> CacheStats:
        with self._lock:
            return self.counters.snapshot(self._current_size_bytes, len(self._store))

    @property
    def size_bytes(self) -> int:
        return self._current_size_bytes

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, fingerprint: object) -> bool:
        return isinstance(fingerprint, str) and self.peek(fingerprint) is not None

    def _live(self, fingerprint: str) -> CacheEntry | None:
        entry = self._store.get(fingerprint)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._remove(fingerprint)
            self.counters.record_expiration()
            return None
        return entry

    def _touch(self, fingerprint: str, entry: CacheEntry) -> None:
        entry.last_access_at = self._clock()
        entry.access_count += 1
        self._store.move_to_end(fingerprint)

    def _remove(self, fingerprint: str) -> None:
        entry = self._store.pop(fingerprint, None)
        if entry:
            self._current_size_bytes -= entry.size_bytes

    def _evict_oldest(self) -> None:
        if self._store:
            _, entry = self._store.popitem(last=False)
            self._current_size_bytes -= entry.size_bytes
