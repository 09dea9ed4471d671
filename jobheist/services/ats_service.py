from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jobheist.ai import factory
from jobheist.ai.config import AnalysisConfig, merge_config
from jobheist.core.abort import ensure_not_aborted, run_abortable
from jobheist.core.credentials import resolve_credentials
from jobheist.core.errors import PreconditionError
from jobheist.schemas.progress import ParsedData, ProgressCallback, ScrapedData
from jobheist.schemas.score import Score
from jobheist.services import job_collector, resume_ingestor
from jobheist.services.analysis_engine import OUTPUT_FORMATS, AnalysisEngine, OutputFormat, select_mode
from jobheist.services.progress import ProgressEmitter
from jobheist.services.render import render

logger = logging.getLogger(__name__)


def _validate_format(fmt: str) -> OutputFormat:
    cleaned = (fmt or "markdown").strip().lower()
    if cleaned not in OUTPUT_FORMATS:
        raise PreconditionError(
            f"Unsupported format '{fmt}'. Expected one of: {', '.join(OUTPUT_FORMATS)}",
            code="invalid_format",
        )
    return cleaned  # type: ignore[return-value]


async def ats_stream(
    resume_path: str | Path,
    job_url: str,
    *,
    firecrawl_key: str | None = None,
    openai_key: str | None = None,
    format: str = "markdown",
    max_age: int | None = None,
    fresh: bool = False,
    config: AnalysisConfig | Mapping[str, Any] | None = None,
    abort: asyncio.Event | None = None,
    env: Mapping[str, str] | None = None,
    on_progress: ProgressCallback | None = None,
) -> str:
    """Run the full pipeline, reporting each phase to ``on_progress``.

    Format, config and both credentials are checked before the resume is
    opened or any network call is made.  Markdown results are the streamed
    narrative text; json and xml results are the rendered score.
    """
    fmt = _validate_format(format)
    merged = merge_config(config)
    openai_api_key, firecrawl_api_key = resolve_credentials(
        openai_key=openai_key,
        firecrawl_key=firecrawl_key,
        env=env,
    )
    ensure_not_aborted(abort)

    started = time.perf_counter()
    emitter = ProgressEmitter(on_progress)
    logger.info(
        "ats_pipeline_start format=%s model=%s reasoning=%s fresh=%s",
        fmt,
        merged.model,
        merged.reasoning,
        fresh,
    )

    emitter.emit("parsing")
    resume = await run_abortable(resume_ingestor.ingest(resume_path), abort)
    emitter.emit("parsed", ParsedData(name=resume.name, email=resume.email))

    emitter.emit("scraping")
    job = await run_abortable(
        job_collector.collect(job_url, firecrawl_api_key, max_age=max_age, fresh=fresh),
        abort,
    )
    emitter.emit("scraped", ScrapedData(title=job.title, company=job.company))

    emitter.emit("analyzing")
    client = factory.get_ai_client(openai_api_key, merged)
    engine = AnalysisEngine(client, merged, emitter, abort=abort)
    outcome = await engine.run(select_mode(fmt, resume.text, job))
    ensure_not_aborted(abort)

    if isinstance(outcome, Score):
        emitter.emit("complete", outcome)
        result = render(outcome, fmt)
    else:
        emitter.emit("complete")
        result = outcome

    logger.info(
        "ats_pipeline_complete format=%s result_chars=%s duration_ms=%s",
        fmt,
        len(result),
        int((time.perf_counter() - started) * 1000),
    )
    return result


async def ats(
    resume_path: str | Path,
    job_url: str,
    *,
    firecrawl_key: str | None = None,
    openai_key: str | None = None,
    format: str = "markdown",
    max_age: int | None = None,
    fresh: bool = False,
    config: AnalysisConfig | Mapping[str, Any] | None = None,
    abort: asyncio.Event | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    return await ats_stream(
        resume_path,
        job_url,
        firecrawl_key=firecrawl_key,
        openai_key=openai_key,
        format=format,
        max_age=max_age,
        fresh=fresh,
        config=config,
        abort=abort,
        env=env,
    )
