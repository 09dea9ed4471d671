from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
import time
from pathlib import Path
from typing import TextIO

from dotenv import load_dotenv

from jobheist.core.config import settings
from jobheist.core.errors import JobheistError, PreconditionError
from jobheist.schemas.progress import ProgressUpdate
from jobheist.schemas.score import Score
from jobheist.services.ats_service import ats_stream

SPINNER = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
FRAME_S = 0.08

STATUS_STEPS = ("parsed", "scraped", "analyzed")
STREAMING_PHASES = ("reasoning", "generating")

MISSING_KEYS_HINT = """Missing API keys. Set via:
  --firecrawl-key=fc_xxx --openai-key=sk-xxx
  export FIRECRAWL_API_KEY=fc_xxx OPENAI_API_KEY=sk-xxx
  echo "FIRECRAWL_API_KEY=fc_xxx" >> ~/.jobheistrc"""

EXAMPLES = """examples:
  jobheist resume.pdf https://jobs.example.com/posting
  jobheist resume.pdf job-url --model=gpt-5 --verbosity=high
  jobheist resume.pdf job-url --reasoning=detailed --fresh
  jobheist resume.pdf job-url --firecrawl-key=fc_xxx --openai-key=sk-xxx"""


class StatusLine:
    """Accumulated one-line progress display on stderr.

    Narrative deltas go straight to stdout; every other phase redraws the
    status line, e.g. ``✓ parsed | ✓ scraped | ⠋ analyzing | 82/100``.
    """

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None):
        self._out = out or sys.stdout
        self._err = err or sys.stderr
        self.completed: set[str] = set()
        self.current = ""
        self.score: int | float | None = None
        self.streaming = False

    def render(self, current: str, *, now: float | None = None) -> str:
        parts = [f"✓ {step}" for step in STATUS_STEPS if step in self.completed]
        if current and current not in ("complete", *STREAMING_PHASES):
            tick = int((time.monotonic() if now is None else now) / FRAME_S)
            parts.append(f"{SPINNER[tick % len(SPINNER)]} {current}")
        if self.score:
            parts.append(f"{self.score}/100")
        return " | ".join(parts)

    def draw(self, text: str) -> None:
        self._err.write(f"\r\x1b[K{text}")
        self._err.flush()

    def newline(self) -> None:
        self._err.write("\n")
        self._err.flush()

    def tick(self) -> None:
        if self.current and not self.streaming:
            self.draw(self.render(self.current))

    def __call__(self, update: ProgressUpdate) -> None:
        phase, data = update.phase, update.data
        score = _score_of(data)
        if score is not None:
            self.score = score

        if phase in ("parsed", "scraped"):
            self.completed.add(phase)
        elif phase == "analyzing":
            self.completed.discard("analyzed")
        elif phase in (*STREAMING_PHASES, "scoring"):
            self.completed.add("analyzed")

        text = getattr(data, "text", None)
        if phase in STREAMING_PHASES and text is not None:
            if not self.streaming:
                self.draw("✓ parsed | ✓ scraped | ✓ analyzed\n")
                self.newline()
                self.streaming = True
                self.current = ""
            self._out.write(text)
            self._out.flush()
        elif phase == "complete":
            self.current = ""
            self.newline()
        else:
            self.current = phase
            self.streaming = False
            self.draw(self.render(phase))


def _score_of(data: object) -> int | float | None:
    if isinstance(data, Score):
        return data.score
    if isinstance(data, dict):
        value = data.get("score")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
    return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobheist",
        description="Score a resume against a job posting the way an ATS would.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("resume", help="Resume file (.pdf, .docx, .txt, .md)")
    parser.add_argument("job_url", help="Job posting URL")
    parser.add_argument("--format", default="markdown", choices=["markdown", "json", "xml"], help="Output format")
    parser.add_argument("--fresh", action="store_true", help="Skip cache and fetch fresh data")
    parser.add_argument("--max-age", type=int, default=None, help="Maximum scrape cache age in milliseconds")
    parser.add_argument("--model", default="gpt-5-mini", help="OpenAI model string")
    parser.add_argument("--verbosity", default="low", choices=["low", "medium", "high"], help="Response verbosity")
    parser.add_argument("--reasoning", default="none", choices=["none", "auto", "detailed"], help="Reasoning output")
    parser.add_argument("--firecrawl-key", default=None, help="Firecrawl API key")
    parser.add_argument("--openai-key", default=None, help="OpenAI API key")
    parser.add_argument("--verbose", action="store_true", help="Log pipeline events to stderr")
    return parser


async def _spin(status: StatusLine) -> None:
    while True:
        status.tick()
        await asyncio.sleep(FRAME_S)


async def run(args: argparse.Namespace, status: StatusLine) -> str:
    spinner = asyncio.create_task(_spin(status))
    try:
        return await ats_stream(
            args.resume,
            args.job_url,
            firecrawl_key=args.firecrawl_key,
            openai_key=args.openai_key,
            format=args.format,
            max_age=args.max_age,
            fresh=args.fresh,
            config={"model": args.model, "verbosity": args.verbosity, "reasoning": args.reasoning},
            on_progress=status,
        )
    finally:
        spinner.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await spinner


def main(argv: list[str] | None = None) -> int:
    load_dotenv(Path.home() / ".jobheistrc")
    load_dotenv()
    args = build_parser().parse_args(argv)
    # Log lines share stderr with the status line, so stay quiet unless asked.
    logging.basicConfig(
        level=settings.log_level if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    status = StatusLine()
    try:
        result = asyncio.run(run(args, status))
    except PreconditionError as exc:
        status.newline()
        if exc.code == "missing_credential":
            print(MISSING_KEYS_HINT, file=sys.stderr)
        else:
            print(f"\n❌ Error: {exc}", file=sys.stderr)
        return 1
    except (JobheistError, OSError) as exc:
        status.newline()
        print(f"\n❌ Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        status.newline()
        return 130

    # Markdown was already streamed to stdout.
    if args.format != "markdown":
        print(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
