from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from jobheist.core.errors import IngestError
from jobheist.parsing.parse import parse_document
from jobheist.schemas.resume import Resume

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_RE = re.compile(r"\+?\(?[0-9]{3}\)?[-\s.]?[0-9]{3}[-\s.]?[0-9]{4,6}")


def _first_non_blank_line(text: str) -> str | None:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return None


def _first_match(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(0) if match else None


def build_resume(text: str) -> Resume:
    """Wrap extracted text in a Resume with best-effort contact fields."""
    return Resume(
        text=text,
        name=_first_non_blank_line(text),
        email=_first_match(EMAIL_RE, text),
        phone=_first_match(PHONE_RE, text),
    )


async def ingest(path: str | Path) -> Resume:
    parsed = await asyncio.to_thread(parse_document, path)
    for warning in parsed.parsing_warnings:
        logger.warning("resume_parsing_warning path=%s: %s", Path(path).name, warning)
    if not parsed.text.strip():
        raise IngestError(f"No extractable text found in resume '{Path(path).name}'", code="empty_document")
    resume = build_resume(parsed.text)
    logger.info(
        "resume_ingested source_type=%s chars=%s has_email=%s has_phone=%s",
        parsed.source_type,
        len(resume.text),
        resume.email is not None,
        resume.phone is not None,
    )
    return resume
