"""Embedding function contract and implementations.

The semantic strategy depends only on the ``EmbeddingFunction`` protocol:
fixed dimension, deterministic for the same text, and similarity-correlated.
``HashingEmbedding`` is a weak placeholder that satisfies the shape of the
contract but carries no semantic meaning; inject a real model for anything
beyond tests and demos.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import numpy as np
import openai

logger = logging.getLogger(__name__)


@runtime_checkable
class EmbeddingFunction(Protocol):
    """Protocol for text embedding functions."""

    @property
    def dimension(self) -> int:
        """Length of every vector returned by ``embed``."""
        ...

    def embed(self, text: str) -> list[float]:
        """Return the embedding vector for ``text``."""
        ...


class HashingEmbedding:
    """Character-code bag embedding. Placeholder only.

    Folds the first ``max_chars`` character codes into ``dimension`` buckets
    and L2-normalizes. Texts with similar character distributions score high
    even when their meanings differ, so it must never be assumed to be
    semantically meaningful.
    """

    def __init__(self, dimension: int = 128, max_chars: int = 100) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self._dimension = dimension
        self._max_chars = max_chars

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        vector = np.zeros(self._dimension, dtype=np.float64)
        for i, char in enumerate(text[: self._max_chars]):
            vector[i % self._dimension] += ord(char) / 255.0
        norm = np.linalg.norm(vector)
        if norm == 0:
            return vector.tolist()
        return (vector / norm).tolist()


class OpenAIEmbedding:
    """Embeddings from an OpenAI-compatible ``/embeddings`` endpoint."""

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        dimension: int = 1536,
        api_key: str | None = None,
        base_url: str | None = None,
        client: openai.OpenAI | None = None,
    ) -> None:
        self._model = model
        self._dimension = dimension
        self._client = client or openai.OpenAI(api_key=api_key, base_url=base_url)

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        response = self._client.embeddings.create(
            model=self._model,
            input=text,
            dimensions=self._dimension,
        )
        vector = list(response.data[0].embedding)
        if len(vector) != self._dimension:
            raise ValueError(
                f"Embedding model '{self._model}' returned {len(vector)} dims, "
                f"expected {self._dimension}"
            )
        return vector


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity; 0.0 for mismatched lengths or zero vectors."""
    if len(a) != len(b) or not a:
        return 0.0
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom == 0:
        return 0.0
    return float(np.dot(va, vb) / denom)
