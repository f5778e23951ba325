"""Tests for config hierarchy."""

import os

import pytest

from textconsensus.config.hierarchy import (
    _coerce_env_value,
    _flatten,
    _load_yaml_config,
    load_config_hierarchy,
)


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("TEXTCONSENSUS_"):
            monkeypatch.delenv(key)


class TestLoadConfigHierarchy:
    def test_returns_defaults(self, tmp_path):
        config = load_config_hierarchy(global_path=tmp_path / "missing.yaml")
        assert config["cache_strategy"] == "exact"
        assert config["consensus_method"] == "weighted-average"

    def test_runtime_overrides(self, tmp_path):
        config = load_config_hierarchy(
            global_path=tmp_path / "missing.yaml", cache_strategy="semantic"
        )
        assert config["cache_strategy"] == "semantic"

    def test_none_overrides_ignored(self, tmp_path):
        config = load_config_hierarchy(global_path=tmp_path / "missing.yaml", cache_strategy=None)
        assert config["cache_strategy"] == "exact"

    def test_env_var_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEXTCONSENSUS_CONSENSUS_METHOD", "voting")
        config = load_config_hierarchy(global_path=tmp_path / "missing.yaml")
        assert config["consensus_method"] == "voting"

    def test_env_numeric_coercion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEXTCONSENSUS_CACHE_MAX_ENTRY_COUNT", "10")
        config = load_config_hierarchy(global_path=tmp_path / "missing.yaml")
        assert config["cache_max_entry_count"] == 10

    def test_runtime_beats_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEXTCONSENSUS_CACHE_STRATEGY", "fuzzy")
        config = load_config_hierarchy(
            global_path=tmp_path / "missing.yaml", cache_strategy="semantic"
        )
        assert config["cache_strategy"] == "semantic"

    def test_project_config_nested(self, tmp_path):
        (tmp_path / "textconsensus.yaml").write_text(
            "cache:\n  strategy: semantic\n  ttlMillis: 5000\n"
            "consensus:\n  requireAgreement: 0.8\n"
        )
        config = load_config_hierarchy(global_path=tmp_path / "missing.yaml")
        assert config["cache_strategy"] == "semantic"
        assert config["cache_ttl_millis"] == 5000
        assert config["consensus_require_agreement"] == 0.8

    def test_project_beats_global(self, tmp_path):
        global_path = tmp_path / "global.yaml"
        global_path.write_text("cache_strategy: fuzzy\nconsensus_method: voting\n")
        (tmp_path / "textconsensus.yaml").write_text("cache_strategy: semantic\n")
        config = load_config_hierarchy(global_path=global_path)
        assert config["cache_strategy"] == "semantic"
        assert config["consensus_method"] == "voting"


class TestLoadYamlConfig:
    def test_missing_file(self, tmp_path):
        assert _load_yaml_config(tmp_path / "nope.yaml") is None

    def test_non_mapping_ignored(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        assert _load_yaml_config(path) is None

    def test_invalid_yaml_ignored(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("key: [unclosed\n")
        assert _load_yaml_config(path) is None


class TestFlatten:
    def test_sections_and_camel_case(self):
        flat = _flatten({"cache": {"maxEntryCount": 5}, "logLevel": "DEBUG"})
        assert flat == {"cache_max_entry_count": 5, "log_level": "DEBUG"}


class TestCoerceEnvValue:
    def test_int(self):
        assert _coerce_env_value("cache_ttl_millis", "1000") == 1000

    def test_float(self):
        assert _coerce_env_value("cache_similarity_threshold", "0.9") == 0.9

    def test_bad_value_kept(self):
        assert _coerce_env_value("cache_ttl_millis", "soon") == "soon"

    def test_untyped(self):
        assert _coerce_env_value("cache_strategy", "exact") == "exact"
