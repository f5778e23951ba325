"""Consensus: merge independent provider results into one analysis."""

from textconsensus.consensus.agreement import agreement_score
from textconsensus.consensus.analyzer import ConsensusAnalyzer, ProviderSpec
from textconsensus.consensus.engine import ConsensusAggregator
from textconsensus.consensus.fields import FIELD_MERGERS, FieldVote, majority_threshold
from textconsensus.consensus.methods import expert_selection, voting, weighted_average
from textconsensus.consensus.resolution import confidence_score, highest_confidence

__all__ = [
    "ConsensusAggregator",
    "ConsensusAnalyzer",
    "ProviderSpec",
    "FieldVote",
    "FIELD_MERGERS",
    "agreement_score",
    "confidence_score",
    "expert_selection",
    "highest_confidence",
    "majority_threshold",
    "voting",
    "weighted_average",
]
