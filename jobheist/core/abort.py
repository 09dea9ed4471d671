from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterable, AsyncIterator, Awaitable
from typing import Any, TypeVar

from jobheist.core.errors import AnalysisCancelled

T = TypeVar("T")

_EXHAUSTED = object()


def ensure_not_aborted(abort: asyncio.Event | None) -> None:
    if abort is not None and abort.is_set():
        raise AnalysisCancelled()


async def run_abortable(awaitable: Awaitable[T], abort: asyncio.Event | None) -> T:
    """Await ``awaitable`` unless ``abort`` fires first, in which case it is cancelled."""
    if abort is None:
        return await awaitable
    if abort.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise AnalysisCancelled()

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(abort.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task in done:
        return task.result()

    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
    raise AnalysisCancelled()


async def _next_item(iterator: AsyncIterator[T]) -> Any:
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return _EXHAUSTED


async def iterate_abortable(source: AsyncIterable[T], abort: asyncio.Event | None) -> AsyncIterator[T]:
    """Yield items from ``source`` one at a time, stopping with ``AnalysisCancelled`` on abort."""
    iterator = source.__aiter__()
    try:
        while True:
            item = await run_abortable(_next_item(iterator), abort)
            if item is _EXHAUSTED:
                return
            yield item
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()
