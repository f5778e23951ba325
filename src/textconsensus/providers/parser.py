"""Parse provider response text into an AnalysisResult."""

from __future__ import annotations

import json
import re
from typing import Any

import yaml
from pydantic import ValidationError

from textconsensus.types import AnalysisResult

# A fenced ```json / ```yaml block wrapping the payload
_FENCE_PATTERN = re.compile(r"```(?:json|yaml|yml)?\s*(.*?)\s*```", re.DOTALL)

# camelCase keys providers commonly emit
_ALIASES = {
    "keyPoints": "key_points",
    "key_points": "key_points",
    "themes": "themes",
    "summary": "summary",
    "sentiment": "sentiment",
    "tone": "tone",
    "recommendations": "recommendations",
    "sections": "sections",
}


def parse_analysis(raw_text: str) -> AnalysisResult:
    """Parse JSON, fenced JSON/YAML, or a bare YAML mapping.

    Unknown keys are kept under ``extra``. Raises ValueError when the text
    holds no mapping.
    """
    payload = _load_mapping(raw_text)
    if payload is None:
        raise ValueError("Provider response is not a JSON or YAML mapping")

    fields: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for key, value in payload.items():
        target = _ALIASES.get(str(key))
        if target is None:
            extra[str(key)] = value
        else:
            fields[target] = value

    if isinstance(fields.get("sentiment"), str):
        fields["sentiment"] = fields["sentiment"].strip().lower()
    fields["recommendations"] = _recommendations(fields.get("recommendations"))

    try:
        return AnalysisResult(**fields, extra=extra)
    except ValidationError as exc:
        raise ValueError(f"Provider response has invalid fields: {exc}") from exc


def _load_mapping(raw_text: str) -> dict[str, Any] | None:
    text = raw_text.strip()
    match = _FENCE_PATTERN.search(text)
    if match:
        text = match.group(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError:
            return None

    return data if isinstance(data, dict) else None


def _recommendations(value: Any) -> list[dict[str, Any]] | None:
    """Accept plain strings as recommendation titles."""
    if value is None:
        return None
    if not isinstance(value, list):
        return None
    return [{"title": item} if isinstance(item, str) else item for item in value]
