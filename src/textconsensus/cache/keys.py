"""Cache key generation: canonicalized, content-addressed fingerprints."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from typing import Any

from textconsensus.errors.exceptions import CacheOperationError
from textconsensus.types import AnalysisRequest

_DEFAULT_VOLATILE = frozenset({"custom_prompt", "customPrompt"})


class KeyFingerprinter:
    """Turn an AnalysisRequest into ``<tag>:<analysis_type>:<sha256 hex>``.

    Canonical form: map keys sorted, strings trimmed, lists sorted (except
    keys listed in ``ordered_fields``), nested maps and list elements
    canonicalized recursively, volatile option fields dropped.
    """

    def __init__(
        self,
        tag: str = "analysis",
        volatile_fields: Iterable[str] = _DEFAULT_VOLATILE,
        ordered_fields: Iterable[str] = (),
    ) -> None:
        self._tag = tag.replace(":", "_")
        self._volatile = frozenset(volatile_fields)
        self._ordered = frozenset(ordered_fields)

    @property
    def tag(self) -> str:
        return self._tag

    def fingerprint(self, request: AnalysisRequest) -> str:
        try:
            canonical = self.canonical_form(request)
            serialized = json.dumps(
                canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False
            )
        except (TypeError, ValueError) as exc:
            raise CacheOperationError(
                f"Cannot canonicalize request of type '{request.type}': {exc}",
                stage="fingerprint",
                original=exc,
            ) from exc
        digest = hashlib.sha256(serialized.encode("utf-8")).hexdigest()
        return f"{self._tag}:{_segment(request.type)}:{digest}"

    def canonical_form(self, request: AnalysisRequest) -> dict[str, Any]:
        options = {k: v for k, v in request.options.items() if k not in self._volatile}
        return {
            "type": request.type.strip(),
            "inputs": self._normalize(request.inputs),
            "options": self._normalize(options),
        }

    def _normalize(self, value: Any, key: str | None = None) -> Any:
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, dict):
            return {str(k): self._normalize(v, str(k)) for k, v in sorted(value.items(), key=_key)}
        if isinstance(value, (list, tuple, set, frozenset)):
            items = [self._normalize(v) for v in value]
            if key in self._ordered and not isinstance(value, (set, frozenset)):
                return items
            return sorted(items, key=_sort_key)
        if value is None or isinstance(value, (bool, int, float)):
            return value
        raise TypeError(f"unsupported value of type {type(value).__name__}")


def split_fingerprint(fingerprint: str) -> tuple[str, str, str]:
    """Split a fingerprint into (tag, analysis_type, digest)."""
    tag, _, rest = fingerprint.partition(":")
    analysis_type, _, digest = rest.rpartition(":")
    return tag, analysis_type, digest


def _segment(analysis_type: str) -> str:
    return analysis_type.strip().replace(":", "_")


def _key(item: tuple[Any, Any]) -> str:
    return str(item[0])


def _sort_key(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)
