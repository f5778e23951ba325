"""Configuration: defaults, hierarchy, validated settings."""

from textconsensus.config.hierarchy import load_config_hierarchy
from textconsensus.config.loader import load_settings
from textconsensus.config.schema import (
    CacheConfig,
    ConsensusConfig,
    Settings,
    build_cache_config,
    build_consensus_config,
)

__all__ = [
    "CacheConfig",
    "ConsensusConfig",
    "Settings",
    "build_cache_config",
    "build_consensus_config",
    "load_config_hierarchy",
    "load_settings",
]
