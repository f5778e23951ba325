"""Match strategies: exact, semantic and fuzzy lookup over a CacheStore."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from textconsensus.cache.embeddings import EmbeddingFunction, HashingEmbedding, cosine_similarity
from textconsensus.cache.keys import split_fingerprint
from textconsensus.cache.memory import CacheStore
from textconsensus.cache.stats import CacheEntry
from textconsensus.errors.exceptions import CacheOperationError, ConfigurationError
from textconsensus.types import AnalysisRequest, CacheStrategyName

logger = logging.getLogger(__name__)

_DEFAULT_THRESHOLD = 0.85


class MatchStrategy(ABC):
    """Lookup/store policy over a CacheStore.

    ``lookup`` records exactly one hit or miss per call on the store counters.
    """

    name: CacheStrategyName

    def lookup(
        self, store: CacheStore, fingerprint: str, request: AnalysisRequest
    ) -> CacheEntry | None:
        entry = store.get(fingerprint)
        if entry is None:
            entry = self._similar(store, fingerprint, request)
            if entry is not None:
                entry = store.touch(entry.fingerprint)
        if entry is None:
            store.counters.record_miss()
            return None
        store.counters.record_hit()
        return entry

    def store(
        self,
        store: CacheStore,
        fingerprint: str,
        request: AnalysisRequest,
        value: Any,
        size_hint: int,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        _, analysis_type, _ = split_fingerprint(fingerprint)
        return store.put(
            fingerprint,
            value,
            size_hint,
            analysis_type=analysis_type,
            embedding=self._embedding_for(request),
            metadata=metadata,
        )

    @abstractmethod
    def _similar(
        self, store: CacheStore, fingerprint: str, request: AnalysisRequest
    ) -> CacheEntry | None:
        """Find a non-exact match after an exact miss."""

    def _embedding_for(self, request: AnalysisRequest) -> list[float] | None:
        return None


class ExactStrategy(MatchStrategy):
    name = CacheStrategyName.EXACT

    def _similar(
        self, store: CacheStore, fingerprint: str, request: AnalysisRequest
    ) -> CacheEntry | None:
        return None


class SemanticStrategy(MatchStrategy):
    """Nearest cached entry by cosine similarity of the request text.

    Only entries of the same analysis type are candidates. A similarity equal
    to the threshold counts as a match; ties prefer the most recently
    accessed entry.
    """

    name = CacheStrategyName.SEMANTIC

    def __init__(
        self,
        embedding_function: EmbeddingFunction | None = None,
        similarity_threshold: float = _DEFAULT_THRESHOLD,
    ) -> None:
        if embedding_function is None:
            logger.warning(
                "Semantic cache using HashingEmbedding placeholder; "
                "matches are not semantically meaningful"
            )
        self._embed = embedding_function or HashingEmbedding()
        self._threshold = similarity_threshold

    @property
    def similarity_threshold(self) -> float:
        return self._threshold

    def _similar(
        self, store: CacheStore, fingerprint: str, request: AnalysisRequest
    ) -> CacheEntry | None:
        query = self._embed_text(request.source_text())
        _, analysis_type, _ = split_fingerprint(fingerprint)

        best: CacheEntry | None = None
        best_score = -1.0
        for entry in store.entries():
            if entry.embedding is None or entry.analysis_type != analysis_type:
                continue
            score = cosine_similarity(query, entry.embedding)
            if score < self._threshold:
                continue
            if score > best_score or (
                score == best_score and best is not None
                and entry.last_access_at > best.last_access_at
            ):
                best, best_score = entry, score

        if best is not None:
            logger.debug("Semantic match %s (similarity=%.3f)", best.fingerprint, best_score)
        return best

    def _embedding_for(self, request: AnalysisRequest) -> list[float] | None:
        return self._embed_text(request.source_text())

    def _embed_text(self, text: str) -> list[float]:
        try:
            return self._embed.embed(text)
        except Exception as exc:
            raise CacheOperationError(
                f"Embedding failed: {exc}", stage="embedding", original=exc
            ) from exc


class FuzzyStrategy(MatchStrategy):
    """Best-effort match on the fingerprint digest prefix.

    Candidates share the analysis type; the score is the common prefix
    length of the two hex digests divided by the shorter length. SHA-256
    digests of related requests are not related, so hits here are
    essentially coincidental. Kept for compatibility, not correctness.
    """

    name = CacheStrategyName.FUZZY

    def __init__(self, similarity_threshold: float = _DEFAULT_THRESHOLD) -> None:
        self._threshold = similarity_threshold

    @property
    def similarity_threshold(self) -> float:
        return self._threshold

    def _similar(
        self, store: CacheStore, fingerprint: str, request: AnalysisRequest
    ) -> CacheEntry | None:
        _, analysis_type, digest = split_fingerprint(fingerprint)

        best: CacheEntry | None = None
        best_score = -1.0
        for entry in store.entries():
            _, cached_type, cached_digest = split_fingerprint(entry.fingerprint)
            if cached_type != analysis_type:
                continue
            score = prefix_ratio(digest, cached_digest)
            if score < self._threshold:
                continue
            if score > best_score or (
                score == best_score and best is not None
                and entry.last_access_at > best.last_access_at
            ):
                best, best_score = entry, score
        return best


def prefix_ratio(a: str, b: str) -> float:
    """Longest common prefix length over the shorter string's length."""
    shortest = min(len(a), len(b))
    if shortest == 0:
        return 0.0
    matching = 0
    for ca, cb in zip(a, b):
        if ca != cb:
            break
        matching += 1
    return matching / shortest


def create_strategy(
    name: CacheStrategyName | str,
    similarity_threshold: float = _DEFAULT_THRESHOLD,
    embedding_function: EmbeddingFunction | None = None,
) -> MatchStrategy:
    try:
        strategy = CacheStrategyName(name)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown cache strategy '{name}'", field="strategy") from exc
    if strategy == CacheStrategyName.SEMANTIC:
        return SemanticStrategy(embedding_function, similarity_threshold)
    if strategy == CacheStrategyName.FUZZY:
        return FuzzyStrategy(similarity_threshold)
    return ExactStrategy()
