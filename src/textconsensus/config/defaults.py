"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# Default cache settings
DEFAULT_CACHE_STRATEGY = "exact"
DEFAULT_CACHE_TTL_MILLIS = 3_600_000
DEFAULT_CACHE_MAX_ENTRY_COUNT = 1000
DEFAULT_CACHE_MAX_SIZE_BYTES = 100 * 1024 * 1024
DEFAULT_SIMILARITY_THRESHOLD = 0.85

# Default consensus settings
DEFAULT_CONSENSUS_METHOD = "weighted-average"
DEFAULT_CONFLICT_RESOLUTION = "expert-review"

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "cache_strategy": DEFAULT_CACHE_STRATEGY,
        "cache_ttl_millis": DEFAULT_CACHE_TTL_MILLIS,
        "cache_max_entry_count": DEFAULT_CACHE_MAX_ENTRY_COUNT,
        "cache_max_size_bytes": DEFAULT_CACHE_MAX_SIZE_BYTES,
        "cache_similarity_threshold": DEFAULT_SIMILARITY_THRESHOLD,
        "cache_invalidate_on": [],
        "consensus_method": DEFAULT_CONSENSUS_METHOD,
        "consensus_require_agreement": None,
        "consensus_conflict_resolution": DEFAULT_CONFLICT_RESOLUTION,
        "log_level": DEFAULT_LOG_LEVEL,
    }
