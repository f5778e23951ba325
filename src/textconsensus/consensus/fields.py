"""Per-field merge variants used by the consensus methods.

Each variant knows how to merge one kind of field under the two voting
regimes: weighted (normalized provider weights) and majority (one vote per
provider). A provider whose field is ``None`` casts no vote for it.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from enum import StrEnum
from typing import Any, NamedTuple

from textconsensus.types import AnalysisResult, Recommendation

_TOP_ITEMS = 5
_TOP_RECOMMENDATIONS = 10
_RECOMMENDATION_MIN_WEIGHT = 0.3


class FieldVote(StrEnum):
    SENTIMENT = "sentiment"
    KEY_POINTS = "key_points"
    THEMES = "themes"
    RECOMMENDATIONS = "recommendations"


class FieldMerger(NamedTuple):
    weighted: Callable[[Sequence[AnalysisResult], Sequence[float]], Any]
    majority: Callable[[Sequence[AnalysisResult]], Any]


def majority_threshold(n: int) -> int:
    """Votes needed for an item to survive majority voting: ceil(n / 2)."""
    return math.ceil(n / 2)


# ── Sentiment (label vote) ──


def weighted_label(results: Sequence[AnalysisResult], weights: Sequence[float]) -> str | None:
    scores: dict[str, float] = {}
    for result, weight in zip(results, weights):
        if result.sentiment:
            scores[result.sentiment] = scores.get(result.sentiment, 0.0) + weight
    return _argmax(scores)


def majority_label(results: Sequence[AnalysisResult]) -> str | None:
    votes: dict[str, int] = {}
    for result in results:
        if result.sentiment:
            votes[result.sentiment] = votes.get(result.sentiment, 0) + 1
    return _argmax(votes)


# ── Key points / themes (item vote) ──


def _item_merger(field: str) -> FieldMerger:
    def weighted(results: Sequence[AnalysisResult], weights: Sequence[float]) -> list[str] | None:
        if all(getattr(r, field) is None for r in results):
            return None
        scores: dict[str, float] = {}
        for result, weight in zip(results, weights):
            for item in _unique(getattr(result, field) or []):
                scores[item] = scores.get(item, 0.0) + weight
        ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
        return [item for item, _ in ranked[:_TOP_ITEMS]]

    def majority(results: Sequence[AnalysisResult]) -> list[str] | None:
        if all(getattr(r, field) is None for r in results):
            return None
        votes: dict[str, int] = {}
        for result in results:
            for item in _unique(getattr(result, field) or []):
                votes[item] = votes.get(item, 0) + 1
        needed = majority_threshold(len(results))
        return [item for item, count in votes.items() if count >= needed]

    return FieldMerger(weighted=weighted, majority=majority)


# ── Recommendations (keyed by title) ──


def weighted_recommendations(
    results: Sequence[AnalysisResult], weights: Sequence[float]
) -> list[Recommendation] | None:
    if not any(r.recommendations for r in results):
        return None
    scores: dict[str, tuple[Recommendation, float]] = {}
    for result, weight in zip(results, weights):
        for rec in _unique_recs(result.recommendations or []):
            existing = scores.get(rec.title)
            if existing:
                scores[rec.title] = (existing[0], existing[1] + weight)
            else:
                scores[rec.title] = (rec, weight)
    kept = [pair for pair in scores.values() if pair[1] > _RECOMMENDATION_MIN_WEIGHT]
    kept.sort(key=lambda pair: pair[1], reverse=True)
    return [rec.model_copy() for rec, _ in kept[:_TOP_RECOMMENDATIONS]]


def majority_recommendations(results: Sequence[AnalysisResult]) -> list[Recommendation] | None:
    if not any(r.recommendations for r in results):
        return None
    votes: dict[str, tuple[Recommendation, int]] = {}
    for result in results:
        for rec in _unique_recs(result.recommendations or []):
            existing = votes.get(rec.title)
            votes[rec.title] = (existing[0], existing[1] + 1) if existing else (rec, 1)
    needed = majority_threshold(len(results))
    return [rec.model_copy() for rec, count in votes.values() if count >= needed]


FIELD_MERGERS: dict[FieldVote, FieldMerger] = {
    FieldVote.SENTIMENT: FieldMerger(weighted=weighted_label, majority=majority_label),
    FieldVote.KEY_POINTS: _item_merger("key_points"),
    FieldVote.THEMES: _item_merger("themes"),
    FieldVote.RECOMMENDATIONS: FieldMerger(
        weighted=weighted_recommendations, majority=majority_recommendations
    ),
}


def _argmax(scores: dict[str, float] | dict[str, int]) -> str | None:
    if not scores:
        return None
    # max() keeps the first key on ties, i.e. the first label seen
    return max(scores, key=lambda label: scores[label])


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _unique_recs(recs: list[Recommendation]) -> list[Recommendation]:
    seen: dict[str, Recommendation] = {}
    for rec in recs:
        seen.setdefault(rec.title, rec)
    return list(seen.values())
