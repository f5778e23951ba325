"""Tests for conflict resolution."""


from textconsensus.consensus.resolution import RESOLUTIONS, confidence_score, highest_confidence
from textconsensus.types import ConflictResolution, Section


class TestConfidenceScore:
    def test_empty_success(self, make_result):
        # status and error factors only
        assert confidence_score(make_result("a")) == 2 / 7

    def test_complete(self, make_result):
        result = make_result(
            "a",
            summary="s",
            key_points=["k"],
            themes=["t"],
            recommendations=["r"],
            sections=[Section(title="intro", content="x")],
        )
        assert confidence_score(result) == 1.0

    def test_blank_summary_not_counted(self, make_result):
        assert confidence_score(make_result("a", summary="   ")) == 2 / 7

    def test_failure(self, make_failure):
        assert confidence_score(make_failure("a")) == 0.0


class TestHighestConfidence:
    def test_picks_most_complete(self, make_result):
        results = [
            make_result("a", 0.5, summary="short"),
            make_result("b", 0.5, summary="full", key_points=["k"], themes=["t"]),
        ]
        assert highest_confidence(results).summary == "full"

    def test_weight_scales(self, make_result):
        results = [
            make_result("a", 0.9, summary="light"),
            make_result("b", 0.1, summary="rich", key_points=["k"], themes=["t"]),
        ]
        assert highest_confidence(results).summary == "light"

    def test_first_wins_tie(self, make_result):
        results = [make_result("a", 0.5, summary="one"), make_result("b", 0.5, summary="two")]
        assert highest_confidence(results).summary == "one"


class TestResolutionTable:
    def test_all_resolutions_registered(self):
        assert set(RESOLUTIONS) == set(ConflictResolution)
