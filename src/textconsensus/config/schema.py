"""Pydantic models for cache and consensus configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError

from textconsensus.config.defaults import (
    DEFAULT_CACHE_MAX_ENTRY_COUNT,
    DEFAULT_CACHE_MAX_SIZE_BYTES,
    DEFAULT_CACHE_TTL_MILLIS,
    DEFAULT_SIMILARITY_THRESHOLD,
)
from textconsensus.errors.exceptions import ConfigurationError
from textconsensus.types import CacheStrategyName, ConflictResolution, ConsensusMethod


class CacheConfig(BaseModel):
    strategy: CacheStrategyName = CacheStrategyName.EXACT
    ttl_millis: int = Field(default=DEFAULT_CACHE_TTL_MILLIS, gt=0)
    max_entry_count: int = Field(default=DEFAULT_CACHE_MAX_ENTRY_COUNT, gt=0)
    max_size_bytes: int = Field(default=DEFAULT_CACHE_MAX_SIZE_BYTES, gt=0)
    similarity_threshold: float = Field(default=DEFAULT_SIMILARITY_THRESHOLD, ge=0.0, le=1.0)
    invalidate_on: list[str] = Field(default_factory=list)
    volatile_fields: list[str] = Field(default_factory=lambda: ["custom_prompt", "customPrompt"])
    ordered_fields: list[str] = Field(default_factory=list)

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_millis / 1000.0


class ConsensusConfig(BaseModel):
    method: ConsensusMethod = ConsensusMethod.WEIGHTED_AVERAGE
    require_agreement: float | None = Field(default=None, ge=0.0, le=1.0)
    conflict_resolution: ConflictResolution = ConflictResolution.EXPERT_REVIEW


class Settings(BaseModel):
    cache: CacheConfig = Field(default_factory=CacheConfig)
    consensus: ConsensusConfig = Field(default_factory=ConsensusConfig)
    log_level: str = "WARNING"


def build_cache_config(**values: Any) -> CacheConfig:
    """Validate cache settings, raising ConfigurationError on bad input."""
    return _build(CacheConfig, values)


def build_consensus_config(**values: Any) -> ConsensusConfig:
    """Validate consensus settings, raising ConfigurationError on bad input."""
    return _build(ConsensusConfig, values)


def settings_from_flat(config: dict[str, Any]) -> Settings:
    """Build Settings from the flat ``cache_*`` / ``consensus_*`` mapping."""
    cache_values = {
        key.removeprefix("cache_"): value
        for key, value in config.items()
        if key.startswith("cache_") and value is not None
    }
    consensus_values = {
        key.removeprefix("consensus_"): value
        for key, value in config.items()
        if key.startswith("consensus_") and value is not None
    }
    return Settings(
        cache=build_cache_config(**cache_values),
        consensus=build_consensus_config(**consensus_values),
        log_level=str(config.get("log_level") or "WARNING"),
    )


def _build(model: type[BaseModel], values: dict[str, Any]) -> Any:
    try:
        return model(**values)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigurationError(
            f"Invalid {model.__name__} value for '{field}': {first.get('msg')}",
            field=field or None,
        ) from exc
