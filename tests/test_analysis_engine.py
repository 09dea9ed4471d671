import asyncio
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
if str(Path(__file__).resolve().parent) not in sys.path:
    sys.path.insert(0, str(Path(__file__).resolve().parent))

from support import (  # noqa: E402
    FakeAIClient,
    FinalObject,
    PartialObject,
    ReasoningDelta,
    TextDelta,
    make_job,
    score_payload,
)

from jobheist.ai.config import AnalysisConfig  # noqa: E402
from jobheist.core.errors import AnalysisCancelled, AnalysisError  # noqa: E402
from jobheist.schemas.score import Score  # noqa: E402
from jobheist.services.analysis_engine import (  # noqa: E402
    AnalysisEngine,
    NarrativeMode,
    StructuredMode,
    select_mode,
)
from jobheist.services.progress import ProgressEmitter  # noqa: E402
from jobheist.services.prompts import reasoning_prompt, scoring_prompt  # noqa: E402

RESUME = "Jane Doe\nPython"


def _ready_emitter(updates: list) -> ProgressEmitter:
    emitter = ProgressEmitter(updates.append)
    for phase in ("parsing", "parsed", "scraping", "scraped", "analyzing"):
        emitter.emit(phase)
    updates.clear()
    return emitter


class SelectModeTests(unittest.TestCase):
    def test_markdown_selects_narrative_mode(self):
        job = make_job()
        mode = select_mode("markdown", RESUME, job)
        self.assertIsInstance(mode, NarrativeMode)
        self.assertEqual(mode.prompt, reasoning_prompt(RESUME, job))

    def test_json_and_xml_select_structured_mode(self):
        job = make_job()
        for fmt in ("json", "xml"):
            with self.subTest(fmt=fmt):
                mode = select_mode(fmt, RESUME, job)
                self.assertIsInstance(mode, StructuredMode)
                self.assertEqual(mode.format, fmt)
                self.assertEqual(mode.prompt, scoring_prompt(RESUME, job))

    def test_unknown_format_is_rejected(self):
        with self.assertRaises(ValueError):
            select_mode("yaml", RESUME, make_job())


class NarrativeModeTests(unittest.IsolatedAsyncioTestCase):
    async def test_returned_text_is_exact_concatenation_of_generating_payloads(self):
        deltas = ["# Report", "\n\n", "Score: **7", "1**", " ✅ done\n", ""]
        events = [ReasoningDelta("thinking...")] + [TextDelta(d) for d in deltas if d]
        events.insert(3, ReasoningDelta("more thought"))
        client = FakeAIClient(text_events=events)
        updates: list = []
        engine = AnalysisEngine(client, AnalysisConfig(reasoning="detailed"), _ready_emitter(updates))

        result = await engine.run(NarrativeMode(prompt="p"))

        generating = [u.data.text for u in updates if u.phase == "generating"]
        self.assertEqual(result, "".join(generating))
        self.assertEqual(result, "".join(deltas))
        self.assertEqual([u.data.text for u in updates if u.phase == "reasoning"], ["thinking...", "more thought"])
        self.assertEqual(client.reasoning_requested, ["detailed"])

    async def test_event_order_matches_stream_order(self):
        events = [TextDelta("a"), ReasoningDelta("r"), TextDelta("b")]
        updates: list = []
        engine = AnalysisEngine(FakeAIClient(text_events=events), AnalysisConfig(reasoning="auto"), _ready_emitter(updates))

        await engine.run(NarrativeMode(prompt="p"))

        self.assertEqual([u.phase for u in updates], ["generating", "reasoning", "generating"])

    async def test_no_reasoning_events_when_reasoning_is_none(self):
        events = [ReasoningDelta("hidden"), TextDelta("visible")]
        updates: list = []
        engine = AnalysisEngine(FakeAIClient(text_events=events), AnalysisConfig(), _ready_emitter(updates))

        result = await engine.run(NarrativeMode(prompt="p"))

        self.assertEqual(result, "visible")
        self.assertNotIn("reasoning", [u.phase for u in updates])

    async def test_stream_failure_is_an_analysis_error_without_retry(self):
        client = FakeAIClient(text_events=[TextDelta("partial")], stream_error=RuntimeError("socket closed"))
        updates: list = []
        engine = AnalysisEngine(client, AnalysisConfig(), _ready_emitter(updates))

        with self.assertRaises(AnalysisError):
            await engine.run(NarrativeMode(prompt="p"))
        self.assertEqual([name for name, _ in client.calls], ["stream_text"])


class StructuredModeTests(unittest.IsolatedAsyncioTestCase):
    async def test_partials_are_forwarded_and_final_object_is_validated(self):
        final = score_payload()
        client = FakeAIClient(
            object_events=[PartialObject({"score": 40}), PartialObject({"score": 82}), FinalObject(final)]
        )
        updates: list = []
        engine = AnalysisEngine(client, AnalysisConfig(), _ready_emitter(updates))

        score = await engine.run(StructuredMode(prompt="p", format="json"))

        self.assertIsInstance(score, Score)
        self.assertEqual(score.score, 82)
        self.assertEqual([u.phase for u in updates], ["scoring", "scoring", "scoring"])
        self.assertIsNone(updates[0].data)
        self.assertEqual([u.data for u in updates[1:]], [{"score": 40}, {"score": 82}])
        self.assertEqual([name for name, _ in client.calls], ["stream_object"])

    async def test_stream_failure_falls_back_once_with_identical_prompt(self):
        client = FakeAIClient(
            object_events=[PartialObject({"score": 10})],
            stream_error=RuntimeError("malformed chunk"),
            generated=score_payload(67),
        )
        updates: list = []
        engine = AnalysisEngine(client, AnalysisConfig(), _ready_emitter(updates))

        score = await engine.run(StructuredMode(prompt="same prompt", format="xml"))

        self.assertEqual(score.score, 67)
        self.assertEqual(client.calls, [("stream_object", "same prompt"), ("generate_object", "same prompt")])

    async def test_invalid_final_object_triggers_fallback(self):
        client = FakeAIClient(object_events=[FinalObject({"score": 500})], generated=score_payload(55))
        engine = AnalysisEngine(client, AnalysisConfig(), _ready_emitter([]))

        score = await engine.run(StructuredMode(prompt="p", format="json"))

        self.assertEqual(score.score, 55)

    async def test_stream_without_final_object_triggers_fallback(self):
        client = FakeAIClient(object_events=[PartialObject({"score": 1})], generated=score_payload(60))
        engine = AnalysisEngine(client, AnalysisConfig(), _ready_emitter([]))

        score = await engine.run(StructuredMode(prompt="p", format="json"))

        self.assertEqual(score.score, 60)

    async def test_second_failure_is_final(self):
        client = FakeAIClient(stream_error=RuntimeError("stream down"), generate_error=RuntimeError("still down"))
        updates: list = []
        emitter = _ready_emitter(updates)
        engine = AnalysisEngine(client, AnalysisConfig(), emitter)

        with self.assertRaises(AnalysisError) as ctx:
            await engine.run(StructuredMode(prompt="p", format="json"))

        self.assertIn("still down", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)
        self.assertEqual([name for name, _ in client.calls], ["stream_object", "generate_object"])
        self.assertFalse(emitter.completed)


class AbortTests(unittest.IsolatedAsyncioTestCase):
    async def test_abort_mid_stream_raises_cancelled(self):
        abort = asyncio.Event()

        class SlowClient(FakeAIClient):
            async def stream_text(self, prompt, *, reasoning="none"):
                yield TextDelta("first")
                abort.set()
                await asyncio.sleep(10)
                yield TextDelta("never")

        updates: list = []
        emitter = _ready_emitter(updates)
        engine = AnalysisEngine(SlowClient(), AnalysisConfig(), emitter, abort=abort)

        with self.assertRaises(AnalysisCancelled):
            await asyncio.wait_for(engine.run(NarrativeMode(prompt="p")), timeout=2)
        self.assertEqual([u.data.text for u in updates], ["first"])
        self.assertFalse(emitter.completed)

    async def test_abort_during_fallback_is_not_wrapped(self):
        abort = asyncio.Event()

        class HangingClient(FakeAIClient):
            async def generate_object(self, prompt, schema):
                abort.set()
                await asyncio.sleep(10)

        client = HangingClient(stream_error=RuntimeError("stream down"))
        engine = AnalysisEngine(client, AnalysisConfig(), _ready_emitter([]), abort=abort)

        with self.assertRaises(AnalysisCancelled):
            await asyncio.wait_for(engine.run(StructuredMode(prompt="p", format="json")), timeout=2)


if __name__ == "__main__":
    unittest.main()
