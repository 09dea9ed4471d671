from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterator, Literal, Protocol, Union

from pydantic import BaseModel

Verbosity = Literal["low", "medium", "high"]
Reasoning = Literal["none", "auto", "detailed"]


@dataclass(frozen=True)
class TextDelta:
    text: str


@dataclass(frozen=True)
class ReasoningDelta:
    text: str


@dataclass(frozen=True)
class PartialObject:
    data: dict[str, Any]


@dataclass(frozen=True)
class FinalObject:
    value: Any


TextStreamEvent = Union[TextDelta, ReasoningDelta]
ObjectStreamEvent = Union[PartialObject, FinalObject]


class AIClient(Protocol):
    def stream_text(
        self, prompt: str, *, reasoning: Reasoning = "none"
    ) -> AsyncIterator[TextStreamEvent]: ...

    def stream_object(
        self, prompt: str, schema: type[BaseModel]
    ) -> AsyncIterator[ObjectStreamEvent]: ...

    async def generate_object(self, prompt: str, schema: type[BaseModel]) -> Any: ...
