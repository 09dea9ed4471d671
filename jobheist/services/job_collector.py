from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import ValidationError

from jobheist.core.config import settings
from jobheist.core.errors import CollectionError
from jobheist.integrations.firecrawl import FirecrawlClient, FirecrawlError
from jobheist.schemas.job import Job, JobExtraction

logger = logging.getLogger(__name__)

# Matched case-sensitively so that prose like "go" or "rust" does not count.
KNOWN_TECHNOLOGIES = (
    "React",
    "TypeScript",
    "JavaScript",
    "Node.js",
    "Next.js",
    "Tailwind",
    "Figma",
    "Python",
    "Django",
    "FastAPI",
    "Java",
    "Kotlin",
    "Swift",
    "Go",
    "Rust",
    "C#",
    "C++",
    "SQL",
    "PostgreSQL",
    "MySQL",
    "MongoDB",
    "Redis",
    "GraphQL",
    "Kafka",
    "Spark",
    "AWS",
    "GCP",
    "Azure",
    "Docker",
    "Kubernetes",
    "Terraform",
)


def _technology_pattern(name: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![\w.+#-]){re.escape(name)}(?![\w+#-])")


_TECH_PATTERNS = [(name, _technology_pattern(name)) for name in KNOWN_TECHNOLOGIES]


def detect_technologies(lines: list[str]) -> list[str]:
    blob = "\n".join(lines)
    return [name for name, pattern in _TECH_PATTERNS if pattern.search(blob)]


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(item) for item in value if item is not None]
    return []


def _as_years(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        match = re.search(r"\d+(?:\.\d+)?", value)
        return float(match.group(0)) if match else None
    return None


def build_job(url: str, data: dict[str, Any]) -> Job:
    """Normalize a scrape ``data`` object into a Job with every field defaulted."""
    extraction = data.get("json") if isinstance(data.get("json"), dict) else None
    markdown = data.get("markdown") if isinstance(data.get("markdown"), str) else None
    if not extraction and not markdown:
        raise CollectionError(f"Failed to scrape job posting at {url}")

    fields: dict[str, Any] = extraction or {}
    qualifications = _as_list(fields.get("qualifications"))
    required_skills = _as_list(fields.get("requiredSkills")) or qualifications
    must_have = _as_list(fields.get("mustHaveRequirements")) or qualifications
    technologies = _as_list(fields.get("technologies")) or detect_technologies(required_skills + must_have)

    payload = {
        "url": url,
        "text": markdown or fields.get("jobDescription") or data.get("html") or "",
        "title": fields.get("title") or fields.get("jobTitle"),
        "company": fields.get("company") or fields.get("companyName"),
        "requiredSkills": required_skills,
        "mustHaveRequirements": must_have,
        "niceToHave": _as_list(fields.get("niceToHave")),
        "keyResponsibilities": _as_list(fields.get("keyResponsibilities")) or _as_list(fields.get("responsibilities")),
        "technologies": technologies,
        "keywords": _as_list(fields.get("keywords")),
        "experienceYears": _as_years(fields.get("experienceYears")),
    }
    try:
        return Job.model_validate(payload)
    except ValidationError as exc:
        raise CollectionError(f"Scraped job posting could not be normalized: {exc}") from exc


def resolve_max_age(max_age: int | None = None, *, fresh: bool = False) -> int:
    if fresh:
        return 0
    if max_age is None:
        return settings.firecrawl_max_age_ms
    return max(0, int(max_age))


async def collect(
    url: str,
    api_key: str,
    *,
    max_age: int | None = None,
    fresh: bool = False,
    client: FirecrawlClient | None = None,
) -> Job:
    scraper = client or FirecrawlClient(api_key)
    max_age_ms = resolve_max_age(max_age, fresh=fresh)
    try:
        data = await scraper.scrape(
            url,
            json_schema=JobExtraction.model_json_schema(by_alias=True),
            max_age_ms=max_age_ms,
        )
    except FirecrawlError as exc:
        raise CollectionError(str(exc)) from exc

    job = build_job(url, data)
    logger.info(
        "job_collected url=%s max_age_ms=%s title=%r company=%r text_chars=%s structured=%s",
        url,
        max_age_ms,
        job.title,
        job.company,
        len(job.text),
        isinstance(data.get("json"), dict),
    )
    return job
