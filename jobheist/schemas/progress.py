from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict

from .score import Score

Phase = Literal[
    "parsing",
    "parsed",
    "scraping",
    "scraped",
    "analyzing",
    "reasoning",
    "generating",
    "scoring",
    "complete",
]

PHASES: tuple[Phase, ...] = (
    "parsing",
    "parsed",
    "scraping",
    "scraped",
    "analyzing",
    "reasoning",
    "generating",
    "scoring",
    "complete",
)


class ParsedData(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    email: str | None = None


class ScrapedData(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    company: str


class TextData(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


# Partial scores arrive as raw camelCase mappings that refine over time.
ScoringData = dict[str, Any]

ProgressData = Union[ParsedData, ScrapedData, TextData, ScoringData, Score, None]


@dataclass(frozen=True)
class ProgressUpdate:
    phase: Phase
    data: ProgressData = None

    def to_payload(self) -> dict[str, Any]:
        if self.data is None:
            return {"phase": self.phase}
        if isinstance(self.data, Score):
            data = self.data.to_payload()
        elif isinstance(self.data, BaseModel):
            data = self.data.model_dump(exclude_none=True)
        else:
            data = self.data
        return {"phase": self.phase, "data": data}


ProgressCallback = Callable[[ProgressUpdate], None]
