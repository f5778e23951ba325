"""textconsensus: multi-provider text analysis with consensus and caching.

Usage:
    ```python
    from textconsensus import CacheManager, ConsensusAnalyzer, ProviderSpec

    analyzer = ConsensusAnalyzer(
        [ProviderSpec(provider_a, weight=0.6), ProviderSpec(provider_b, weight=0.4)],
        cache=CacheManager(),
    )
    outcome = await analyzer.analyze(request)
    ```
"""

from textconsensus.cache import CacheManager, CacheStore, KeyFingerprinter
from textconsensus.config import CacheConfig, ConsensusConfig, Settings, load_settings
from textconsensus.consensus import ConsensusAggregator, ConsensusAnalyzer, ProviderSpec
from textconsensus.errors import (
    AllProvidersFailed,
    CacheOperationError,
    ConfigurationError,
    ProviderFailure,
    TextConsensusError,
)
from textconsensus.types import (
    AnalysisRequest,
    AnalysisResult,
    ConsensusOutcome,
    ProviderResult,
)

__version__ = "0.1.0"

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "ProviderResult",
    "ConsensusOutcome",
    "CacheManager",
    "CacheStore",
    "KeyFingerprinter",
    "ConsensusAggregator",
    "ConsensusAnalyzer",
    "ProviderSpec",
    "CacheConfig",
    "ConsensusConfig",
    "Settings",
    "load_settings",
    "TextConsensusError",
    "ConfigurationError",
    "CacheOperationError",
    "ProviderFailure",
    "AllProvidersFailed",
]
