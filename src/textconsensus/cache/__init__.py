"""Cache subsystem: fingerprinted keys, bounded LRU store, pluggable matching."""

from textconsensus.cache.embeddings import (
    EmbeddingFunction,
    HashingEmbedding,
    OpenAIEmbedding,
    cosine_similarity,
)
from textconsensus.cache.keys import KeyFingerprinter, split_fingerprint
from textconsensus.cache.manager import CacheManager
from textconsensus.cache.memory import CacheStore
from textconsensus.cache.stats import CacheCounters, CacheEntry, CacheStats
from textconsensus.cache.strategies import (
    ExactStrategy,
    FuzzyStrategy,
    MatchStrategy,
    SemanticStrategy,
    create_strategy,
)

__all__ = [
    "CacheManager",
    "CacheStore",
    "CacheEntry",
    "CacheStats",
    "CacheCounters",
    "KeyFingerprinter",
    "split_fingerprint",
    "MatchStrategy",
    "ExactStrategy",
    "SemanticStrategy",
    "FuzzyStrategy",
    "create_strategy",
    "EmbeddingFunction",
    "HashingEmbedding",
    "OpenAIEmbedding",
    "cosine_similarity",
]
