"""Inter-provider agreement scoring."""

from __future__ import annotations

from collections.abc import Sequence
from itertools import combinations

from textconsensus.types import ProviderResult


def sentiment_agreement(results: Sequence[ProviderResult]) -> float | None:
    """``(n - distinct + 1) / n`` over present labels; None with fewer than 2."""
    labels = [r.analysis.sentiment for r in results if r.analysis.sentiment]
    if len(labels) < 2:
        return None
    return (len(labels) - len(set(labels)) + 1) / len(labels)


def theme_agreement(results: Sequence[ProviderResult]) -> float | None:
    """Mean pairwise Jaccard of non-empty theme sets; None with fewer than 2."""
    theme_sets = [set(r.analysis.themes) for r in results if r.analysis.themes]
    if len(theme_sets) < 2:
        return None
    overlaps = [len(a & b) / len(a | b) for a, b in combinations(theme_sets, 2)]
    return sum(overlaps) / len(overlaps)


def agreement_score(results: Sequence[ProviderResult]) -> float:
    """Mean of the computable agreement components, 1.0 when none apply."""
    if len(results) < 2:
        return 1.0
    components = [
        score
        for score in (sentiment_agreement(results), theme_agreement(results))
        if score is not None
    ]
    if not components:
        return 1.0
    return sum(components) / len(components)
