"""Analysis provider backed by an OpenAI-compatible chat completion API."""

from __future__ import annotations

import json
import logging
import time

import openai
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from textconsensus.providers.parser import parse_analysis
from textconsensus.types import AnalysisRequest, ProviderResult, ProviderStatus

logger = logging.getLogger(__name__)

# Transient errors that warrant retry
_TRANSIENT_EXCEPTIONS = (
    openai.RateLimitError,
    openai.InternalServerError,
    openai.APIConnectionError,
    openai.APITimeoutError,
)

_SYSTEM_PROMPT = (
    "You analyze text. Reply with a single JSON object with the keys "
    "summary, sentiment (positive|negative|neutral|mixed), tone, keyPoints, "
    "themes and recommendations (objects with title, description, priority)."
)


class OpenAIProvider:
    """ProviderInvoker for any OpenAI-compatible chat endpoint."""

    def __init__(
        self,
        provider_id: str,
        model: str = "gpt-4.1-mini",
        api_key: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.0,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self._provider_id = provider_id
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client = client or openai.AsyncOpenAI(api_key=api_key, base_url=base_url)

    @property
    def provider_id(self) -> str:
        return self._provider_id

    async def invoke(self, request: AnalysisRequest) -> ProviderResult:
        start = time.monotonic()
        content = await self._complete(self._build_user_prompt(request))
        latency_ms = (time.monotonic() - start) * 1000

        try:
            analysis = parse_analysis(content)
        except ValueError as exc:
            logger.warning("Provider %s returned unparseable output: %s", self._provider_id, exc)
            return ProviderResult(
                provider_id=self._provider_id,
                status=ProviderStatus.FAILURE,
                error=str(exc),
                latency_ms=latency_ms,
            )

        return ProviderResult(
            provider_id=self._provider_id,
            analysis=analysis,
            latency_ms=latency_ms,
        )

    async def close(self) -> None:
        await self._client.close()

    @retry(
        retry=retry_if_exception_type(_TRANSIENT_EXCEPTIONS),
        wait=wait_exponential(multiplier=1, min=1, max=60),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    async def _complete(self, user_prompt: str) -> str:
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""

    @staticmethod
    def _build_user_prompt(request: AnalysisRequest) -> str:
        lines = [f"Analysis type: {request.type}"]
        custom = request.options.get("custom_prompt") or request.options.get("customPrompt")
        if custom:
            lines.append(f"Instructions: {custom}")
        lines.append("Inputs:")
        lines.append(json.dumps(request.inputs, ensure_ascii=False, indent=2, default=str))
        return "\n".join(lines)
