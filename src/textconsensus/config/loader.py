"""YAML loading for settings, requests and provider result files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from textconsensus.config.hierarchy import load_config_hierarchy
from textconsensus.config.schema import Settings, settings_from_flat
from textconsensus.types import AnalysisRequest, ProviderResult


def load_settings(**runtime_overrides: Any) -> Settings:
    """Resolve the config hierarchy into validated Settings."""
    return settings_from_flat(load_config_hierarchy(**runtime_overrides))


def load_yaml(path: str | Path) -> Any:
    """Load any YAML (or JSON) file safely."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path) as f:
        return yaml.safe_load(f)


def load_request_yaml(path: str | Path) -> AnalysisRequest:
    """Load an analysis request file (top-level ``request`` key optional)."""
    raw = load_yaml(path)
    if not isinstance(raw, dict):
        raise ValueError(f"Expected YAML mapping, got {type(raw).__name__} in {path}")
    return AnalysisRequest(**raw.get("request", raw))


def load_provider_results(path: str | Path) -> list[ProviderResult]:
    """Load a list of provider results (top-level ``providers`` key optional)."""
    raw = load_yaml(path)
    if isinstance(raw, dict):
        raw = raw.get("providers")
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of provider results in {path}")
    return [ProviderResult(**item) for item in raw]
