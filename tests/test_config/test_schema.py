"""Tests for configuration models."""

import pytest

from textconsensus.config.defaults import get_defaults
from textconsensus.config.schema import (
    CacheConfig,
    ConsensusConfig,
    build_cache_config,
    build_consensus_config,
    settings_from_flat,
)
from textconsensus.errors import ConfigurationError
from textconsensus.types import CacheStrategyName, ConflictResolution, ConsensusMethod


class TestDefaults:
    def test_cache_defaults(self):
        config = CacheConfig()
        assert config.strategy == CacheStrategyName.EXACT
        assert config.ttl_millis == 3_600_000
        assert config.ttl_seconds == 3600.0
        assert config.max_entry_count == 1000
        assert config.max_size_bytes == 100 * 1024 * 1024
        assert config.similarity_threshold == 0.85

    def test_consensus_defaults(self):
        config = ConsensusConfig()
        assert config.method == ConsensusMethod.WEIGHTED_AVERAGE
        assert config.require_agreement is None
        assert config.conflict_resolution == ConflictResolution.EXPERT_REVIEW


class TestBuilders:
    def test_valid(self):
        config = build_cache_config(strategy="semantic", similarity_threshold=0.9)
        assert config.strategy == CacheStrategyName.SEMANTIC

    def test_unknown_strategy(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_cache_config(strategy="nearest")
        assert exc_info.value.field == "strategy"

    def test_threshold_out_of_range(self):
        with pytest.raises(ConfigurationError):
            build_cache_config(similarity_threshold=1.5)

    def test_non_positive_ttl(self):
        with pytest.raises(ConfigurationError):
            build_cache_config(ttl_millis=0)

    def test_unknown_method(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_consensus_config(method="median")
        assert exc_info.value.field == "method"

    def test_require_agreement_range(self):
        with pytest.raises(ConfigurationError):
            build_consensus_config(require_agreement=2)


class TestSettingsFromFlat:
    def test_defaults_round_trip(self):
        settings = settings_from_flat(get_defaults())
        assert settings.cache == CacheConfig()
        assert settings.consensus == ConsensusConfig()
        assert settings.log_level == "WARNING"

    def test_prefixes_stripped(self):
        settings = settings_from_flat({
            "cache_strategy": "fuzzy",
            "consensus_method": "voting",
            "consensus_require_agreement": 0.7,
        })
        assert settings.cache.strategy == CacheStrategyName.FUZZY
        assert settings.consensus.method == ConsensusMethod.VOTING
        assert settings.consensus.require_agreement == 0.7
