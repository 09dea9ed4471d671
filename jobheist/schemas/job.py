from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

UNKNOWN_TITLE = "Unknown Position"
UNKNOWN_COMPANY = "Unknown Company"


def _clean_text(value) -> str:
    if not isinstance(value, str):
        return ""
    return " ".join(value.split())


class JobExtraction(BaseModel):
    """Structured fields requested from the scraping service."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = UNKNOWN_TITLE
    company: str = UNKNOWN_COMPANY
    required_skills: list[str] = Field(default_factory=list)
    must_have_requirements: list[str] = Field(default_factory=list)
    nice_to_have: list[str] = Field(default_factory=list)
    experience_years: float | None = None
    key_responsibilities: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list, description="ATS keywords to match")

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value):
        return _clean_text(value) or UNKNOWN_TITLE

    @field_validator("company", mode="before")
    @classmethod
    def _default_company(cls, value):
        return _clean_text(value) or UNKNOWN_COMPANY

    @field_validator(
        "required_skills",
        "must_have_requirements",
        "nice_to_have",
        "key_responsibilities",
        "technologies",
        "keywords",
        mode="before",
    )
    @classmethod
    def _clean_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return []
        return [str(item).strip() for item in value if item is not None and str(item).strip()]


class Job(JobExtraction):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    text: str
    url: str
