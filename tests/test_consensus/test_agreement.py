"""Tests for agreement scoring."""

import pytest

from textconsensus.consensus.agreement import (
    agreement_score,
    sentiment_agreement,
    theme_agreement,
)


class TestSentimentAgreement:
    def test_unanimous(self, make_result):
        results = [make_result("a", sentiment="positive"), make_result("b", sentiment="positive")]
        assert sentiment_agreement(results) == 1.0

    def test_split(self, make_result):
        results = [make_result("a", sentiment="positive"), make_result("b", sentiment="negative")]
        assert sentiment_agreement(results) == 0.5

    def test_three_way(self, make_result):
        results = [
            make_result("a", sentiment="positive"),
            make_result("b", sentiment="negative"),
            make_result("c", sentiment="negative"),
        ]
        assert sentiment_agreement(results) == pytest.approx(2 / 3)

    def test_single_label_not_computable(self, make_result):
        assert sentiment_agreement([make_result("a", sentiment="positive"), make_result("b")]) is None


class TestThemeAgreement:
    def test_identical(self, make_result):
        results = [make_result("a", themes=["x", "y"]), make_result("b", themes=["y", "x"])]
        assert theme_agreement(results) == 1.0

    def test_disjoint(self, make_result):
        results = [make_result("a", themes=["x"]), make_result("b", themes=["y"])]
        assert theme_agreement(results) == 0.0

    def test_mean_pairwise_jaccard(self, make_result):
        results = [
            make_result("a", themes=["x", "y"]),
            make_result("b", themes=["x"]),
            make_result("c", themes=["z"]),
        ]
        # pairs: ab=1/2, ac=0, bc=0
        assert theme_agreement(results) == pytest.approx(1 / 6)

    def test_empty_sets_skipped(self, make_result):
        results = [make_result("a", themes=["x"]), make_result("b", themes=[])]
        assert theme_agreement(results) is None


class TestAgreementScore:
    def test_single_result(self, make_result):
        assert agreement_score([make_result("a", sentiment="positive")]) == 1.0

    def test_nothing_comparable(self, make_result):
        assert agreement_score([make_result("a"), make_result("b")]) == 1.0

    def test_contradiction_is_low(self, make_result):
        results = [
            make_result("a", sentiment="positive", themes=["growth"]),
            make_result("b", sentiment="negative", themes=["decline"]),
        ]
        assert agreement_score(results) == pytest.approx(0.25)
        assert agreement_score(results) < 0.5

    def test_only_sentiment_component(self, make_result):
        results = [make_result("a", sentiment="positive"), make_result("b", sentiment="negative")]
        assert agreement_score(results) == 0.5

    def test_in_unit_interval(self, make_result):
        results = [
            make_result("a", sentiment="positive", themes=["a", "b"]),
            make_result("b", sentiment="positive", themes=["b"]),
            make_result("c", sentiment="mixed", themes=["c"]),
        ]
        assert 0.0 <= agreement_score(results) <= 1.0
