"""Consensus methods: weighted average, majority voting, expert selection."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from textconsensus.consensus.fields import FIELD_MERGERS, FieldVote
from textconsensus.types import AnalysisResult, ConsensusMethod, ProviderResult

_MAX_EXPERT_ADDITIONS = 3


def normalize_weights(weights: Sequence[float]) -> list[float]:
    total = sum(weights)
    if total <= 0:
        return [1.0 / len(weights)] * len(weights) if weights else []
    return [w / total for w in weights]


def expert_index(results: Sequence[ProviderResult]) -> int:
    """Index of the max-weight provider; first one wins ties."""
    best = 0
    for i, result in enumerate(results):
        if result.weight > results[best].weight:
            best = i
    return best


def weighted_average(results: Sequence[ProviderResult]) -> AnalysisResult:
    """Max-weight result as base, every voted field re-resolved by weight."""
    analyses = [r.analysis for r in results]
    weights = normalize_weights([r.weight for r in results])
    merged = analyses[expert_index(results)].model_copy(deep=True)

    sentiment = FIELD_MERGERS[FieldVote.SENTIMENT].weighted(analyses, weights)
    if sentiment is not None:
        merged.sentiment = sentiment

    key_points = FIELD_MERGERS[FieldVote.KEY_POINTS].weighted(analyses, weights)
    if key_points is not None:
        merged.key_points = key_points

    themes = FIELD_MERGERS[FieldVote.THEMES].weighted(analyses, weights)
    if themes is not None:
        merged.themes = themes

    recommendations = FIELD_MERGERS[FieldVote.RECOMMENDATIONS].weighted(analyses, weights)
    if recommendations is not None:
        merged.recommendations = recommendations

    return merged


def voting(results: Sequence[ProviderResult]) -> AnalysisResult:
    """One vote per provider; items need ceil(N/2) verbatim occurrences."""
    analyses = [r.analysis for r in results]
    merged = analyses[0].model_copy(deep=True)

    sentiment = FIELD_MERGERS[FieldVote.SENTIMENT].majority(analyses)
    if sentiment is not None:
        merged.sentiment = sentiment

    key_points = FIELD_MERGERS[FieldVote.KEY_POINTS].majority(analyses)
    if key_points is not None:
        merged.key_points = key_points

    themes = FIELD_MERGERS[FieldVote.THEMES].majority(analyses)
    if themes is not None:
        merged.themes = themes

    recommendations = FIELD_MERGERS[FieldVote.RECOMMENDATIONS].majority(analyses)
    if recommendations is not None:
        merged.recommendations = recommendations

    return merged


def expert_selection(results: Sequence[ProviderResult]) -> AnalysisResult:
    """Max-weight result verbatim, plus up to 3 key points it missed."""
    index = expert_index(results)
    merged = results[index].analysis.model_copy(deep=True)

    known = set(merged.key_points or [])
    additions: list[str] = []
    for i, result in enumerate(results):
        if i == index:
            continue
        for point in result.analysis.key_points or []:
            if len(additions) >= _MAX_EXPERT_ADDITIONS:
                break
            if point not in known:
                known.add(point)
                additions.append(point)

    if additions:
        merged.key_points = [*(merged.key_points or []), *additions]
    return merged


METHODS: dict[ConsensusMethod, Callable[[Sequence[ProviderResult]], AnalysisResult]] = {
    ConsensusMethod.WEIGHTED_AVERAGE: weighted_average,
    ConsensusMethod.VOTING: voting,
    ConsensusMethod.EXPERT_SELECTION: expert_selection,
}
