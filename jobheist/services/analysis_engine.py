"""Generation stage of the ATS pipeline.

The requested output format picks one of two modes:

* ``NarrativeMode`` (markdown): one token stream carrying reasoning and answer
  deltas.  Each delta is read once and dispatched to both the progress
  observer and the answer accumulator, so the returned text is exactly the
  concatenation of the ``generating`` payloads.
* ``StructuredMode`` (json/xml): a stream of progressively refined partial
  scores.  If that stream fails, the same prompt is sent once more as a
  single non-streaming request; a second failure is final.

Transport retries happen inside the AI client and are not visible here.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any, AsyncIterator, Literal, Union

from pydantic import ValidationError

from jobheist.ai.config import AnalysisConfig
from jobheist.ai.types import AIClient, FinalObject, PartialObject, ReasoningDelta, TextDelta
from jobheist.core.abort import iterate_abortable, run_abortable
from jobheist.core.errors import AnalysisCancelled, AnalysisError
from jobheist.schemas.job import Job
from jobheist.schemas.progress import TextData
from jobheist.schemas.score import Score
from jobheist.services.progress import ProgressEmitter
from jobheist.services.prompts import reasoning_prompt, scoring_prompt

logger = logging.getLogger(__name__)

OutputFormat = Literal["markdown", "json", "xml"]
OUTPUT_FORMATS: tuple[OutputFormat, ...] = ("markdown", "json", "xml")


@dataclass(frozen=True)
class NarrativeMode:
    prompt: str


@dataclass(frozen=True)
class StructuredMode:
    prompt: str
    format: Literal["json", "xml"]


AnalysisMode = Union[NarrativeMode, StructuredMode]


def select_mode(fmt: OutputFormat, resume_text: str, job: Job) -> AnalysisMode:
    if fmt == "markdown":
        return NarrativeMode(prompt=reasoning_prompt(resume_text, job))
    if fmt in ("json", "xml"):
        return StructuredMode(prompt=scoring_prompt(resume_text, job), format=fmt)
    raise ValueError(f"Unsupported output format '{fmt}'")


class AnalysisEngine:
    def __init__(
        self,
        client: AIClient,
        config: AnalysisConfig,
        emitter: ProgressEmitter,
        *,
        abort: asyncio.Event | None = None,
    ):
        self._client = client
        self._config = config
        self._emitter = emitter
        self._abort = abort

    async def run(self, mode: AnalysisMode) -> str | Score:
        if isinstance(mode, NarrativeMode):
            return await self.narrate(mode)
        return await self.score(mode)

    async def narrate(self, mode: NarrativeMode) -> str:
        surface_reasoning = self._config.reasoning != "none"
        answer: list[str] = []
        stream = self._client.stream_text(mode.prompt, reasoning=self._config.reasoning)
        async with aclosing(self._guard(stream, "Narrative generation")) as events:
            async for event in events:
                if isinstance(event, TextDelta):
                    answer.append(event.text)
                    self._emitter.emit("generating", TextData(text=event.text))
                elif isinstance(event, ReasoningDelta) and surface_reasoning:
                    self._emitter.emit("reasoning", TextData(text=event.text))
        return "".join(answer)

    async def score(self, mode: StructuredMode) -> Score:
        self._emitter.emit("scoring")
        try:
            return await self._stream_score(mode)
        except AnalysisError as exc:
            logger.warning(
                "score_stream_failed model=%s: %s; falling back to single-shot generation",
                self._config.model,
                exc,
            )

        try:
            value = await run_abortable(self._client.generate_object(mode.prompt, Score), self._abort)
            return Score.model_validate(value)
        except AnalysisCancelled:
            raise
        except Exception as exc:
            raise AnalysisError(f"Failed to generate analysis: {exc}") from exc

    async def _stream_score(self, mode: StructuredMode) -> Score:
        final: Any = None
        stream = self._client.stream_object(mode.prompt, Score)
        async with aclosing(self._guard(stream, "Structured stream")) as events:
            async for event in events:
                if isinstance(event, PartialObject):
                    self._emitter.emit("scoring", event.data)
                elif isinstance(event, FinalObject):
                    final = event.value
        if final is None:
            raise AnalysisError("Structured stream ended without a final object")
        try:
            return Score.model_validate(final)
        except ValidationError as exc:
            raise AnalysisError(f"Structured stream returned an invalid score: {exc}") from exc

    async def _guard(self, stream: AsyncIterator[Any], label: str) -> AsyncIterator[Any]:
        try:
            async with aclosing(iterate_abortable(stream, self._abort)) as events:
                async for event in events:
                    yield event
        except AnalysisCancelled:
            raise
        except Exception as exc:
            raise AnalysisError(f"{label} failed: {exc}") from exc
