from __future__ import annotations

from jobheist.schemas.progress import Phase, ProgressCallback, ProgressData, ProgressUpdate

_START = "idle"

# Legal successors per phase.  ``analyzing`` opens the generation stage for
# both modes; reasoning and generating may alternate while tokens interleave.
TRANSITIONS: dict[str, frozenset[str]] = {
    _START: frozenset({"parsing"}),
    "parsing": frozenset({"parsed"}),
    "parsed": frozenset({"scraping"}),
    "scraping": frozenset({"scraped"}),
    "scraped": frozenset({"analyzing"}),
    "analyzing": frozenset({"reasoning", "generating", "scoring", "complete"}),
    "reasoning": frozenset({"reasoning", "generating", "complete"}),
    "generating": frozenset({"reasoning", "generating", "complete"}),
    "scoring": frozenset({"scoring", "complete"}),
    "complete": frozenset(),
}


class ProgressEmitter:
    """Delivers phase events to at most one observer, synchronously and in order.

    Every event is checked against ``TRANSITIONS`` whether or not an observer
    is registered, so the one-shot and streaming entry points walk the same
    state machine.  Nothing is buffered or deduplicated.
    """

    def __init__(self, callback: ProgressCallback | None = None):
        self._callback = callback
        self._phase: str = _START

    @property
    def phase(self) -> str:
        return self._phase

    @property
    def completed(self) -> bool:
        return self._phase == "complete"

    def emit(self, phase: Phase, data: ProgressData = None) -> None:
        allowed = TRANSITIONS.get(self._phase, frozenset())
        if phase not in allowed:
            raise RuntimeError(f"Illegal progress transition {self._phase!r} -> {phase!r}")
        self._phase = phase
        if self._callback is None:
            return
        self._callback(ProgressUpdate(phase=phase, data=data))
