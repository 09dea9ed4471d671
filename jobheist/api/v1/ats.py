import asyncio
import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import StreamingResponse

from jobheist.core.config import settings
from jobheist.core.errors import (
    AnalysisCancelled,
    AnalysisError,
    CollectionError,
    IngestError,
    JobheistError,
    PreconditionError,
)
from jobheist.core.rate_limit import rate_limit
from jobheist.core.security import require_api_key
from jobheist.parsing.parse import SUPPORTED_EXTENSIONS
from jobheist.schemas.progress import ProgressUpdate
from jobheist.services import ats_service

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_api_key)])

HTTP_CLIENT_CLOSED_REQUEST = 499
DISCONNECT_POLL_S = 1.0

_STATUS_BY_ERROR: tuple[tuple[type[JobheistError], int], ...] = (
    (PreconditionError, status.HTTP_400_BAD_REQUEST),
    (IngestError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (CollectionError, status.HTTP_502_BAD_GATEWAY),
    (AnalysisError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (AnalysisCancelled, HTTP_CLIENT_CLOSED_REQUEST),
)


def status_for(exc: JobheistError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_payload(exc: JobheistError) -> dict[str, Any]:
    return {"message": str(exc), "code": exc.code, "status": status_for(exc)}


def _sse_event(event: str, payload: dict[str, Any]) -> str:
    data = json.dumps(payload, ensure_ascii=False)
    return f"event: {event}\ndata: {data}\n\n"


async def _next_event(
    queue: asyncio.Queue[dict[str, Any]], request: Request, poll_s: float = DISCONNECT_POLL_S
) -> dict[str, Any] | None:
    """Wait for the next queued event, returning None once the client has gone away."""
    while True:
        if await request.is_disconnected():
            return None
        try:
            return await asyncio.wait_for(queue.get(), timeout=poll_s)
        except asyncio.TimeoutError:
            continue


async def _save_upload(file: UploadFile) -> Path:
    filename = file.filename or "resume"
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type '{suffix or filename}'. Allowed: {', '.join(sorted(SUPPORTED_EXTENSIONS))}.",
        )

    fd, raw_path = tempfile.mkstemp(prefix="jobheist-", suffix=suffix)
    path = Path(raw_path)
    total = 0
    try:
        with os.fdopen(fd, "wb") as handle:
            while True:
                chunk = await file.read(1024 * 64)
                if not chunk:
                    break
                total += len(chunk)
                if total > settings.max_upload_bytes:
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail=f"File too large. Maximum allowed size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
                    )
                handle.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    return path


def _config(model: str | None, verbosity: str | None, reasoning: str | None) -> dict[str, Any]:
    return {"model": model, "verbosity": verbosity, "reasoning": reasoning}


@router.post("/ats")
@rate_limit()
async def ats_once(
    request: Request,
    resume: UploadFile = File(...),
    job_url: str = Form(...),
    format: str = Form("markdown"),
    fresh: bool = Form(False),
    model: str | None = Form(None),
    verbosity: str | None = Form(None),
    reasoning: str | None = Form(None),
):
    _ = request
    path = await _save_upload(resume)
    try:
        result = await ats_service.ats(
            path,
            job_url,
            format=format,
            fresh=fresh,
            config=_config(model, verbosity, reasoning),
        )
    except JobheistError as exc:
        logger.warning("ats_request_failed code=%s: %s", exc.code, exc)
        raise HTTPException(status_code=status_for(exc), detail=str(exc)) from exc
    finally:
        path.unlink(missing_ok=True)
    return {"format": format.strip().lower(), "result": result}


@router.post("/ats/stream")
@rate_limit()
async def ats_stream(
    request: Request,
    resume: UploadFile = File(...),
    job_url: str = Form(...),
    format: str = Form("markdown"),
    fresh: bool = Form(False),
    model: str | None = Form(None),
    verbosity: str | None = Form(None),
    reasoning: str | None = Form(None),
):
    path = await _save_upload(resume)

    async def event_stream():
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        abort = asyncio.Event()

        def push_progress(update: ProgressUpdate) -> None:
            queue.put_nowait({"kind": "progress", "payload": update.to_payload()})

        async def worker() -> None:
            try:
                result = await ats_service.ats_stream(
                    path,
                    job_url,
                    format=format,
                    fresh=fresh,
                    config=_config(model, verbosity, reasoning),
                    abort=abort,
                    on_progress=push_progress,
                )
                queue.put_nowait({"kind": "result", "payload": {"format": format.strip().lower(), "result": result}})
            except JobheistError as exc:
                logger.warning("ats_stream_failed code=%s: %s", exc.code, exc)
                queue.put_nowait({"kind": "error", "payload": _error_payload(exc)})
            except Exception as exc:  # pragma: no cover - guard rail
                logger.exception("ats_stream_crashed")
                queue.put_nowait(
                    {
                        "kind": "error",
                        "payload": {"message": str(exc), "status": status.HTTP_500_INTERNAL_SERVER_ERROR},
                    }
                )
            finally:
                queue.put_nowait({"kind": "done", "payload": {}})

        task = asyncio.create_task(worker())

        try:
            while True:
                event = await _next_event(queue, request)
                if event is None:
                    logger.info("ats_stream_client_disconnected")
                    break
                kind = event.get("kind")
                if kind == "done":
                    yield _sse_event("done", {})
                    break
                yield _sse_event(kind, event.get("payload", {}))
        finally:
            abort.set()
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            path.unlink(missing_ok=True)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
