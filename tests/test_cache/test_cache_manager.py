"""Tests for the cache manager."""

import logging


from textconsensus.cache.manager import CacheManager, estimate_size
from textconsensus.config.schema import CacheConfig
from textconsensus.types import AnalysisRequest, AnalysisResult


def _req(text: str, analysis_type: str = "summary") -> AnalysisRequest:
    return AnalysisRequest(type=analysis_type, inputs={"text": text})


class TestLookupStore:
    def test_miss_then_hit(self, clock):
        cache = CacheManager(clock=clock)
        assert cache.lookup(_req("a")) is None
        assert cache.store(_req("a"), {"summary": "x"})
        assert cache.lookup(_req("a")) == {"summary": "x"}
        stats = cache.stats()
        assert (stats.hits, stats.misses) == (1, 1)
        assert stats.strategy == "exact"

    def test_fingerprint_uses_strategy_tag(self):
        cache = CacheManager(CacheConfig(strategy="fuzzy"))
        assert cache.fingerprint(_req("a")).startswith("fuzzy:summary:")

    def test_stores_pydantic_models(self):
        cache = CacheManager()
        value = AnalysisResult(summary="hello")
        cache.store(_req("a"), value)
        assert cache.lookup(_req("a")) == value

    def test_ttl_from_config(self, clock):
        cache = CacheManager(CacheConfig(ttl_millis=2000), clock=clock)
        cache.store(_req("a"), 1)
        clock.advance(2.5)
        assert cache.lookup(_req("a")) is None

    def test_fingerprint_failure_degrades_to_miss(self, caplog):
        cache = CacheManager()
        request = AnalysisRequest(type="t", inputs={"obj": object()})
        with caplog.at_level(logging.WARNING):
            assert cache.lookup(request) is None
        stats = cache.stats()
        assert stats.errors == 1
        assert stats.misses == 1
        assert "degraded" in caplog.text

    def test_store_failure_returns_false(self):
        cache = CacheManager()
        request = AnalysisRequest(type="t", inputs={"obj": object()})
        assert cache.store(request, 1) is False
        assert cache.stats().errors == 1
        assert len(cache) == 0

    def test_embedding_failure_degrades_to_miss(self, fixed_embedding):
        config = CacheConfig(strategy="semantic", similarity_threshold=0.5)
        cache = CacheManager(config, embedding_function=fixed_embedding({}))
        assert cache.lookup(_req("unknown")) is None
        assert cache.stats().errors == 1

    def test_semantic_manager_hit(self, fixed_embedding):
        embedding = fixed_embedding({"cached": [1.0, 0.0], "query": [0.98, 0.05]})
        config = CacheConfig(strategy="semantic", similarity_threshold=0.9)
        cache = CacheManager(config, embedding_function=embedding)
        cache.store(_req("cached"), "v")
        assert cache.lookup(_req("query")) == "v"


class TestInvalidation:
    def test_invalidate_pattern(self):
        cache = CacheManager()
        cache.store(_req("a", "tone"), 1)
        cache.store(_req("b", "summary"), 2)
        assert cache.invalidate(":tone:") == 1
        assert cache.lookup(_req("b", "summary")) == 2

    def test_invalidate_all(self):
        cache = CacheManager()
        cache.store(_req("a"), 1)
        cache.store(_req("b"), 2)
        assert cache.invalidate() == 2
        assert len(cache) == 0

    def test_invalidate_on_event(self):
        cache = CacheManager(CacheConfig(invalidate_on=["model-updated"]))
        cache.store(_req("a"), 1)
        assert cache.invalidate_on_event("other") is False
        assert len(cache) == 1
        assert cache.invalidate_on_event("model-updated") is True
        assert len(cache) == 0


class TestMaintenance:
    def test_entries_sorted_by_hits(self, clock):
        cache = CacheManager(clock=clock)
        cache.store(_req("a"), 1)
        cache.store(_req("b"), 2)
        cache.lookup(_req("b"))
        cache.lookup(_req("b"))
        rows = cache.entries()
        assert rows[0]["hits"] == 2
        assert rows[1]["hits"] == 0
        assert set(rows[0]) == {"fingerprint", "hits", "age_seconds", "size_bytes"}

    def test_optimize_removes_cold_old_entries(self, clock):
        cache = CacheManager(CacheConfig(ttl_millis=100_000), clock=clock)
        cache.store(_req("cold"), 1)
        cache.store(_req("hot"), 2)
        for _ in range(4):
            cache.lookup(_req("hot"))
        clock.advance(60)
        assert cache.optimize() == 1
        assert cache.lookup(_req("hot")) == 2
        assert cache.lookup(_req("cold")) is None

    def test_optimize_keeps_young_entries(self, clock):
        cache = CacheManager(CacheConfig(ttl_millis=100_000), clock=clock)
        cache.store(_req("cold"), 1)
        cache.store(_req("hot"), 2)
        cache.lookup(_req("hot"))
        assert cache.optimize() == 0

    def test_export_import(self, clock):
        source = CacheManager(clock=clock)
        source.store(_req("a"), {"x": 1}, metadata={"origin": "test"})
        data = source.export()
        assert data[0]["metadata"] == {"origin": "test"}

        target = CacheManager(clock=clock)
        assert target.import_entries(data) == 1
        assert target.lookup(_req("a")) == {"x": 1}

    def test_clear_resets_counters(self):
        cache = CacheManager()
        cache.store(_req("a"), 1)
        cache.lookup(_req("a"))
        cache.clear()
        stats = cache.stats()
        assert len(cache) == 0
        assert stats.hits == 0


class TestHealth:
    def test_healthy(self):
        cache = CacheManager()
        cache.lookup(_req("a"))
        assert cache.health()["status"] == "healthy"

    def test_degraded_on_errors(self):
        cache = CacheManager()
        bad = AnalysisRequest(type="t", inputs={"obj": object()})
        cache.lookup(bad)
        cache.lookup(_req("a"))
        health = cache.health()
        assert health["status"] == "degraded"
        assert "recommendation" in health


class TestEstimateSize:
    def test_json_value(self):
        assert estimate_size({"a": 1}) == len('{"a": 1}')

    def test_model_value(self):
        model = AnalysisResult(summary="s")
        assert estimate_size(model) == len(model.model_dump_json())
