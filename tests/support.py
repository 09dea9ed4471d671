import sys
from pathlib import Path
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from jobheist.ai.types import FinalObject, PartialObject, ReasoningDelta, TextDelta  # noqa: E402
from jobheist.schemas.job import Job  # noqa: E402


def score_payload(score: Any = 82, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "score": score,
        "keywordAnalysis": {
            "strongMatches": [{"keyword": "Python", "jobFrequency": 4, "resumeFrequency": 3}],
            "underRepresented": [
                {"keyword": "AWS", "jobFrequency": 5, "resumeFrequency": 1, "suggestion": "Mention AWS Lambda work"}
            ],
            "notFound": [
                {"keyword": "Terraform", "jobFrequency": 3, "impact": 6, "suggestion": "Add Terraform to skills"}
            ],
        },
        "suggestions": [
            {
                "type": "enhance",
                "location": "Experience",
                "current": "Built APIs",
                "suggested": "Built Python APIs on AWS",
                "impact": 5,
                "rationale": "Matches two required keywords",
            },
            {
                "type": "add",
                "location": "Skills",
                "suggested": "Terraform",
                "impact": 4,
                "rationale": "Listed as a must-have",
            },
        ],
        "analysis": {
            "topPriorities": ["Python backend services"],
            "currentStrengths": ["API design"],
            "opportunities": ["Infrastructure as code"],
            "compatibility": {"current": 72, "potential": 88},
        },
        "optimizations": ["Add a skills section"],
    }
    payload.update(overrides)
    return payload


def make_job(**overrides: Any) -> Job:
    values: dict[str, Any] = {
        "url": "https://jobs.example.com/123",
        "text": "# Backend Engineer\nPython, AWS and Terraform.",
        "title": "Backend Engineer",
        "company": "Acme",
        "requiredSkills": ["Python", "AWS"],
        "mustHaveRequirements": ["3+ years Python"],
        "technologies": ["Python", "AWS", "Terraform"],
    }
    values.update(overrides)
    return Job.model_validate(values)


class FakeAIClient:
    """In-memory AIClient that replays scripted events and records calls."""

    def __init__(
        self,
        *,
        text_events: list[Any] | None = None,
        object_events: list[Any] | None = None,
        stream_error: Exception | None = None,
        generated: Any = None,
        generate_error: Exception | None = None,
    ):
        self.text_events = text_events or []
        self.object_events = object_events or []
        self.stream_error = stream_error
        self.generated = generated
        self.generate_error = generate_error
        self.calls: list[tuple[str, str]] = []
        self.reasoning_requested: list[str] = []

    async def stream_text(self, prompt: str, *, reasoning: str = "none"):
        self.calls.append(("stream_text", prompt))
        self.reasoning_requested.append(reasoning)
        for event in self.text_events:
            yield event
        if self.stream_error is not None:
            raise self.stream_error

    async def stream_object(self, prompt: str, schema):
        self.calls.append(("stream_object", prompt))
        for event in self.object_events:
            yield event
        if self.stream_error is not None:
            raise self.stream_error

    async def generate_object(self, prompt: str, schema):
        self.calls.append(("generate_object", prompt))
        if self.generate_error is not None:
            raise self.generate_error
        return self.generated


__all__ = [
    "PROJECT_ROOT",
    "FakeAIClient",
    "FinalObject",
    "PartialObject",
    "ReasoningDelta",
    "TextDelta",
    "make_job",
    "score_payload",
]
