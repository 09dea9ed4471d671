from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

Number = int | float
SuggestionType = Literal["add", "enhance", "rewrite"]

PLACEHOLDER = "None identified"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class StrongMatch(_CamelModel):
    keyword: str
    job_frequency: int
    resume_frequency: int


class UnderRepresentedKeyword(_CamelModel):
    keyword: str
    job_frequency: int
    resume_frequency: int
    suggestion: str


class MissingKeyword(_CamelModel):
    keyword: str
    job_frequency: int
    impact: Number
    suggestion: str


class KeywordAnalysis(_CamelModel):
    strong_matches: list[StrongMatch]
    under_represented: list[UnderRepresentedKeyword]
    not_found: list[MissingKeyword]


class Suggestion(_CamelModel):
    type: SuggestionType
    location: str
    current: str | None = None
    suggested: str
    impact: Number
    rationale: str


class Compatibility(_CamelModel):
    current: Number
    potential: Number


class RoleAnalysis(_CamelModel):
    top_priorities: list[str]
    current_strengths: list[str]
    opportunities: list[str]
    compatibility: Compatibility

    @field_validator("top_priorities", "current_strengths", "opportunities")
    @classmethod
    def _at_least_one(cls, value: list[str]) -> list[str]:
        return value or [PLACEHOLDER]


class Score(_CamelModel):
    """Structured ATS compatibility result.

    Serialized forms use the camelCase aliases (``keywordAnalysis``,
    ``strongMatches`` ...).  Empty string lists are normalized to a single
    placeholder entry; the keyword buckets and ``suggestions`` may be empty.
    """

    score: Number
    keyword_analysis: KeywordAnalysis
    suggestions: list[Suggestion]
    analysis: RoleAnalysis
    optimizations: list[str]

    @field_validator("score")
    @classmethod
    def _in_range(cls, value: Number) -> Number:
        if not 0 <= value <= 100:
            raise ValueError("score must be between 0 and 100")
        return value

    @field_validator("optimizations")
    @classmethod
    def _at_least_one(cls, value: list[str]) -> list[str]:
        return value or [PLACEHOLDER]

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
