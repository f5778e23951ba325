import pytest

from textconsensus.types import (
    AnalysisRequest,
    AnalysisResult,
    ProviderResult,
    ProviderStatus,
    Recommendation,
)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider:
    """ProviderInvoker returning a canned analysis, or raising."""

    def __init__(self, provider_id, analysis=None, error=None, status=ProviderStatus.SUCCESS):
        self._provider_id = provider_id
        self._analysis = analysis or AnalysisResult()
        self._error = error
        self._status = status
        self.calls = 0

    @property
    def provider_id(self):
        return self._provider_id

    async def invoke(self, request):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return ProviderResult(
            provider_id="ignored",
            status=self._status,
            analysis=self._analysis,
            error=None if self._status == ProviderStatus.SUCCESS else "reported failure",
        )


class FixedEmbedding:
    """Embedding lookup table keyed by exact text."""

    def __init__(self, vectors: dict[str, list[float]], dimension: int = 2) -> None:
        self._vectors = vectors
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        return self._vectors[text]


def _make_result(provider_id, weight=1.0, **analysis) -> ProviderResult:
    recs = analysis.pop("recommendations", None)
    if recs is not None:
        analysis["recommendations"] = [
            Recommendation(title=r) if isinstance(r, str) else r for r in recs
        ]
    return ProviderResult(
        provider_id=provider_id,
        weight=weight,
        analysis=AnalysisResult(**analysis),
    )


def _make_failure(provider_id, error="boom", weight=1.0) -> ProviderResult:
    return ProviderResult(
        provider_id=provider_id,
        weight=weight,
        status=ProviderStatus.FAILURE,
        error=error,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_result():
    """Factory: make_result(provider_id, weight=1.0, **analysis_fields)."""
    return _make_result


@pytest.fixture
def make_failure():
    """Factory: make_failure(provider_id, error="boom", weight=1.0)."""
    return _make_failure


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def fixed_embedding():
    return FixedEmbedding


@pytest.fixture
def request_a():
    return AnalysisRequest(
        type="sentiment",
        inputs={"text": "The launch went well", "tags": ["b", "a"]},
        options={"depth": "full"},
    )


@pytest.fixture
def sample_results_yaml(tmp_path):
    """Write a provider results file and return its path."""
    content = """
providers:
  - provider_id: alpha
    weight: 0.6
    analysis:
      sentiment: positive
      themes: [growth, launch]
      key_points: [revenue up]
  - provider_id: beta
    weight: 0.3
    analysis:
      sentiment: negative
      themes: [growth]
  - provider_id: gamma
    weight: 0.2
    analysis:
      sentiment: negative
      themes: [launch]
"""
    path = tmp_path / "results.yaml"
    path.write_text(content)
    return path


@pytest.fixture
def sample_request_yaml(tmp_path):
    """Write an analysis request file and return its path."""
    content = """
request:
  type: summary
  inputs:
    text: "  Quarterly report  "
  options:
    custom_prompt: "be brief"
"""
    path = tmp_path / "request.yaml"
    path.write_text(content)
    return path
