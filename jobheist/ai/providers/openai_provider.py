from __future__ import annotations

import logging
from typing import Any, AsyncIterator

from openai import AsyncOpenAI
from pydantic import BaseModel

from jobheist.ai.types import (
    FinalObject,
    ObjectStreamEvent,
    PartialObject,
    Reasoning,
    ReasoningDelta,
    TextDelta,
    TextStreamEvent,
    Verbosity,
)
from jobheist.core.config import settings

logger = logging.getLogger(__name__)


class AIProviderError(RuntimeError):
    pass


def _supports_verbosity(model: str) -> bool:
    return model.startswith("gpt-5")


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: str | None = None,
        timeout_s: float | None = None,
        max_retries: int | None = None,
        verbosity: Verbosity = "low",
    ):
        self._model = model
        self._verbosity = verbosity
        key = (api_key or "").strip()
        if not key:
            raise RuntimeError("OPENAI_API_KEY is missing")

        self._client = AsyncOpenAI(
            api_key=key,
            base_url=(base_url or settings.openai_base_url or None),
            timeout=settings.openai_timeout_s if timeout_s is None else timeout_s,
            max_retries=settings.openai_max_retries if max_retries is None else max_retries,
        )

    def _messages(self, prompt: str) -> list[dict[str, str]]:
        return [{"role": "user", "content": prompt}]

    def _verbosity_kwargs(self) -> dict[str, Any]:
        if not _supports_verbosity(self._model):
            return {}
        return {"verbosity": self._verbosity}

    async def stream_text(
        self, prompt: str, *, reasoning: Reasoning = "none"
    ) -> AsyncIterator[TextStreamEvent]:
        create_kwargs: dict[str, Any] = {
            "model": self._model,
            "input": prompt,
            "stream": True,
        }
        if _supports_verbosity(self._model):
            create_kwargs["text"] = {"verbosity": self._verbosity}
        if reasoning != "none":
            create_kwargs["reasoning"] = {"summary": reasoning}

        logger.debug("openai_text_stream model=%s prompt_len=%s", self._model, len(prompt))
        stream = await self._client.responses.create(**create_kwargs)
        async with stream:
            async for event in stream:
                if event.type == "response.output_text.delta":
                    if event.delta:
                        yield TextDelta(event.delta)
                elif event.type == "response.reasoning_summary_text.delta":
                    if event.delta:
                        yield ReasoningDelta(event.delta)
                elif event.type == "response.failed":
                    error = getattr(event.response, "error", None)
                    raise AIProviderError(f"Response failed: {getattr(error, 'message', None) or 'unknown error'}")
                elif event.type == "error":
                    raise AIProviderError(f"Response stream error: {event.message}")

    async def stream_object(
        self, prompt: str, schema: type[BaseModel]
    ) -> AsyncIterator[ObjectStreamEvent]:
        logger.debug("openai_object_stream model=%s prompt_len=%s", self._model, len(prompt))
        async with self._client.chat.completions.stream(
            model=self._model,
            messages=self._messages(prompt),
            response_format=schema,
            **self._verbosity_kwargs(),
        ) as stream:
            async for event in stream:
                if event.type == "content.delta" and isinstance(event.parsed, dict):
                    yield PartialObject(dict(event.parsed))
                elif event.type == "refusal.done":
                    raise AIProviderError(f"Model refused to answer: {event.refusal}")
            completion = await stream.get_final_completion()
        yield FinalObject(self._parsed(completion))

    async def generate_object(self, prompt: str, schema: type[BaseModel]) -> Any:
        logger.debug("openai_object_generate model=%s prompt_len=%s", self._model, len(prompt))
        completion = await self._client.chat.completions.parse(
            model=self._model,
            messages=self._messages(prompt),
            response_format=schema,
            **self._verbosity_kwargs(),
        )
        return self._parsed(completion)

    @staticmethod
    def _parsed(completion: Any) -> Any:
        message = completion.choices[0].message if completion.choices else None
        if message is None:
            raise AIProviderError("Completion returned no choices")
        if getattr(message, "refusal", None):
            raise AIProviderError(f"Model refused to answer: {message.refusal}")
        if message.parsed is None:
            raise AIProviderError("Completion returned no structured content")
        return message.parsed
