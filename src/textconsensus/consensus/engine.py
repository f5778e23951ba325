"""Consensus aggregator: merge, score agreement, resolve conflicts."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from textconsensus.config.schema import ConsensusConfig
from textconsensus.consensus.agreement import agreement_score
from textconsensus.consensus.methods import METHODS
from textconsensus.consensus.resolution import RESOLUTIONS
from textconsensus.errors.exceptions import AllProvidersFailed, ConfigurationError
from textconsensus.types import ConsensusOutcome, ProviderResult

logger = logging.getLogger(__name__)


class ConsensusAggregator:
    """Combine independent provider results into one ConsensusOutcome.

    Failed providers are excluded entirely: no vote and no weight. The call
    fails only when nothing usable remains. A weight outside (0, 1] on any
    result raises ConfigurationError.
    """

    def __init__(self, config: ConsensusConfig | None = None) -> None:
        self._config = config or ConsensusConfig()

    @property
    def config(self) -> ConsensusConfig:
        return self._config

    def combine(
        self,
        results: Sequence[ProviderResult],
        config: ConsensusConfig | None = None,
    ) -> ConsensusOutcome:
        config = config or self._config
        for result in results:
            check_weight(result.provider_id, result.weight)

        successes = [r for r in results if r.succeeded]
        failures = [r for r in results if not r.succeeded]

        if not successes:
            raise AllProvidersFailed(
                failures={r.provider_id: r.error or "unknown error" for r in failures},
            )

        merged = METHODS[config.method](successes)
        used = config.method.value

        score = agreement_score(successes)
        low_agreement = False
        if config.require_agreement is not None and score < config.require_agreement:
            low_agreement = True
            merged = RESOLUTIONS[config.conflict_resolution](successes)
            used = config.conflict_resolution.value
            logger.info(
                "Agreement %.3f below %.3f; resolved via %s",
                score,
                config.require_agreement,
                used,
            )

        return ConsensusOutcome(
            merged=merged,
            provider_results=list(results),
            agreement_score=score,
            low_agreement=low_agreement,
            method=config.method,
            resolution_method_used=used,
            successful_providers=len(successes),
            failed_providers=len(failures),
        )

def check_weight(provider_id: str, weight: float) -> None:
    if not 0.0 < weight <= 1.0:
        raise ConfigurationError(
            f"Weight for provider '{provider_id}' must be in (0, 1], got {weight}",
            field="weight",
        )

