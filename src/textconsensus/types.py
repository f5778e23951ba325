"""Shared Pydantic models for textconsensus."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

# ── Enums ──


class CacheStrategyName(StrEnum):
    EXACT = "exact"
    SEMANTIC = "semantic"
    FUZZY = "fuzzy"


class ConsensusMethod(StrEnum):
    WEIGHTED_AVERAGE = "weighted-average"
    VOTING = "voting"
    EXPERT_SELECTION = "expert-selection"


class ConflictResolution(StrEnum):
    EXPERT_REVIEW = "expert-review"
    HIGHEST_CONFIDENCE = "highest-confidence"
    WEIGHTED_MERGE = "weighted-merge"


class ProviderStatus(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"


# ── Request ──


class AnalysisRequest(BaseModel):
    type: str
    inputs: dict[str, Any] = Field(default_factory=dict)
    options: dict[str, Any] = Field(default_factory=dict)

    def source_text(self) -> str:
        """Text used as the embedding source for semantic matching."""
        parts = [
            value.strip()
            for _, value in sorted(self.inputs.items())
            if isinstance(value, str) and value.strip()
        ]
        return "\n".join(parts)


# ── Analysis content ──


class Recommendation(BaseModel):
    title: str
    description: str = ""
    priority: str = "medium"
    category: str = ""
    actionable: bool = True


class Section(BaseModel):
    title: str
    content: Any = ""
    order: int = 0


class AnalysisResult(BaseModel):
    """Content produced by one provider, or the merged consensus.

    Every field is optional; ``None`` means the provider did not vote on it.
    """

    summary: str | None = None
    sentiment: str | None = None
    tone: str | None = None
    key_points: list[str] | None = None
    themes: list[str] | None = None
    recommendations: list[Recommendation] | None = None
    sections: list[Section] | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


class ProviderResult(BaseModel):
    provider_id: str
    weight: float = 1.0
    status: ProviderStatus = ProviderStatus.SUCCESS
    analysis: AnalysisResult = Field(default_factory=AnalysisResult)
    error: str | None = None
    latency_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == ProviderStatus.SUCCESS


class ConsensusOutcome(BaseModel):
    merged: AnalysisResult
    provider_results: list[ProviderResult] = Field(default_factory=list)
    agreement_score: float = 1.0
    low_agreement: bool = False
    method: ConsensusMethod = ConsensusMethod.WEIGHTED_AVERAGE
    resolution_method_used: str = ConsensusMethod.WEIGHTED_AVERAGE.value
    successful_providers: int = 0
    failed_providers: int = 0
    cached: bool = False
