"""Configuration hierarchy: merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.textconsensus/config.yaml)
  3. Project config   (./textconsensus.yaml)
  4. Environment variables (TEXTCONSENSUS_*)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from textconsensus.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".textconsensus" / "config.yaml"
_PROJECT_CONFIG_NAME = "textconsensus.yaml"

# Map of environment variables to config keys
_ENV_MAP: dict[str, str] = {
    "TEXTCONSENSUS_CACHE_STRATEGY": "cache_strategy",
    "TEXTCONSENSUS_CACHE_TTL_MILLIS": "cache_ttl_millis",
    "TEXTCONSENSUS_CACHE_MAX_ENTRY_COUNT": "cache_max_entry_count",
    "TEXTCONSENSUS_CACHE_MAX_SIZE_BYTES": "cache_max_size_bytes",
    "TEXTCONSENSUS_CACHE_SIMILARITY_THRESHOLD": "cache_similarity_threshold",
    "TEXTCONSENSUS_CONSENSUS_METHOD": "consensus_method",
    "TEXTCONSENSUS_CONSENSUS_REQUIRE_AGREEMENT": "consensus_require_agreement",
    "TEXTCONSENSUS_CONSENSUS_CONFLICT_RESOLUTION": "consensus_conflict_resolution",
    "TEXTCONSENSUS_LOG_LEVEL": "log_level",
}

# Keys that should be parsed as specific types
_TYPE_MAP: dict[str, type] = {
    "cache_ttl_millis": int,
    "cache_max_entry_count": int,
    "cache_max_size_bytes": int,
    "cache_similarity_threshold": float,
    "consensus_require_agreement": float,
}

# Sections whose nested YAML keys are flattened to ``<section>_<key>``
_SECTIONS = ("cache", "consensus")


def load_config_hierarchy(
    global_path: Path | None = None,
    **runtime_overrides: Any,
) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a merged flat dict with the final resolved values.
    """
    config = get_defaults()

    # Layer 2: Global config
    global_cfg = _load_yaml_config(global_path or _GLOBAL_CONFIG_PATH)
    if global_cfg:
        config.update(global_cfg)

    # Layer 3: Project config (search from cwd upward)
    project_path = _find_project_config()
    if project_path:
        project_cfg = _load_yaml_config(project_path)
        if project_cfg:
            config.update(project_cfg)

    # Layer 4: Environment variables
    config.update(_load_env_vars())

    # Layer 5: Runtime arguments (highest priority)
    for key, value in runtime_overrides.items():
        if value is not None:
            config[key] = value

    return config


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Load a YAML config file if it exists, flattened to config keys."""
    if not path.exists() or not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if isinstance(data, dict):
            return _flatten(data)
        logger.warning("Config file %s is not a mapping, ignoring", path)
    except Exception as e:
        logger.warning("Failed to load config %s: %s", path, e)
    return None


def _flatten(data: dict[str, Any]) -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if key in _SECTIONS and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                flat[f"{key}_{_snake(sub_key)}"] = sub_value
        else:
            flat[_snake(key)] = value
    return flat


def _snake(key: str) -> str:
    """Accept both ``ttlMillis`` and ``ttl_millis`` spellings."""
    out = []
    for ch in key:
        if ch.isupper():
            out.append("_" + ch.lower())
        else:
            out.append(ch)
    return "".join(out).replace("-", "_")


def _find_project_config() -> Path | None:
    """Search for textconsensus.yaml from cwd upward."""
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.exists():
            return candidate
    return None


def _load_env_vars() -> dict[str, Any]:
    """Read TEXTCONSENSUS_* environment variables."""
    result: dict[str, Any] = {}
    for env_key, config_key in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        result[config_key] = _coerce_env_value(config_key, value)
    return result


def _coerce_env_value(key: str, value: str) -> Any:
    """Coerce an environment variable string to the appropriate type."""
    target_type = _TYPE_MAP.get(key)
    if target_type:
        try:
            return target_type(value)
        except (ValueError, TypeError):
            logger.warning(
                "Cannot convert env var for '%s' to %s: %s", key, target_type.__name__, value
            )
            return value

    return value
