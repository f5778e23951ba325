"""Conflict resolution applied when agreement falls below the required level."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from textconsensus.consensus.methods import expert_selection, weighted_average
from textconsensus.types import AnalysisResult, ConflictResolution, ProviderResult

# summary, key_points, themes, recommendations, sections, status, error
_CONFIDENCE_FACTORS = 7


def confidence_score(result: ProviderResult) -> float:
    """Completeness of a provider result in [0, 1]."""
    analysis = result.analysis
    present = [
        bool(analysis.summary and analysis.summary.strip()),
        bool(analysis.key_points),
        bool(analysis.themes),
        bool(analysis.recommendations),
        bool(analysis.sections),
        result.succeeded,
        result.error is None,
    ]
    return sum(present) / _CONFIDENCE_FACTORS


def highest_confidence(results: Sequence[ProviderResult]) -> AnalysisResult:
    best = 0
    best_score = confidence_score(results[0]) * results[0].weight
    for i, result in enumerate(results[1:], start=1):
        score = confidence_score(result) * result.weight
        if score > best_score:
            best, best_score = i, score
    return results[best].analysis.model_copy(deep=True)


RESOLUTIONS: dict[ConflictResolution, Callable[[Sequence[ProviderResult]], AnalysisResult]] = {
    ConflictResolution.HIGHEST_CONFIDENCE: highest_confidence,
    ConflictResolution.WEIGHTED_MERGE: weighted_average,
    ConflictResolution.EXPERT_REVIEW: expert_selection,
}
