"""
job_assistant.py
Job Application Assistant - command-line client

What it does
------------
Holds the form state of one assistant instance, runs at most one generation at
a time against the /api/generate endpoint, renders the cover letter as it
streams in, and keeps the local history of completed applications.

Usage
-----
CLI:
  python job_assistant.py generate --job job.txt --cv cv.pdf --tone Friendly --length Short
  python job_assistant.py generate --job job.txt --cv cv.docx --pdf cover-letter.pdf
  python job_assistant.py history
  python job_assistant.py show <application id> --pdf cover-letter.pdf

API:
  from job_assistant import ApplicationAssistant
  assistant = ApplicationAssistant(client, HistoryStore())
  session = await assistant.submit(request, on_delta=print)
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Callable, List, Optional

import httpx
from loguru import logger

import config
from export_pdf import PdfExportError, export_cover_letter_pdf
from extract_cv_text import DocumentExtractionError, extract_cv_text
from generation_session import GenerationSession, SessionState
from history_store import HistoryStore
from logger import setup_logger
from models import Application, GenerationRequest, Length, Tone

EXPORT_ERROR_MESSAGE = "Error exporting to PDF. Please try again."


class SessionBusyError(RuntimeError):
    """A generation is already in flight for this assistant."""


class ApplicationAssistant:
    """
    One assistant instance: the history it shows and the session it runs.

    Only one session may be active at a time. A second submission while one is
    streaming is refused, never queued.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        history: HistoryStore,
        endpoint_url: str = config.GENERATE_URL,
    ):
        self.client = client
        self.history = history
        self.endpoint_url = endpoint_url
        self.session: Optional[GenerationSession] = None
        self.history.load()

    @property
    def is_busy(self) -> bool:
        return self.session is not None and self.session.is_active

    def can_submit(self, request: GenerationRequest) -> bool:
        """Whether the generate trigger is enabled."""
        return not self.is_busy and request.is_complete()

    def recent_applications(self) -> List[Application]:
        return self.history.recent(config.HISTORY_DISPLAY_LIMIT)

    async def submit(
        self,
        request: GenerationRequest,
        on_delta: Optional[Callable[[str], None]] = None,
        on_state: Optional[Callable[[SessionState], None]] = None,
    ) -> GenerationSession:
        """
        Start a fresh session for the request and run it to a terminal state.

        Raises:
            SessionBusyError: If a session is still submitting or streaming
        """
        if self.is_busy:
            raise SessionBusyError("A cover letter is already being generated")

        session = GenerationSession(self.client, self.history, self.endpoint_url)
        session.subscribe(on_delta=on_delta, on_state=on_state)
        self.session = session
        await session.run(request)
        return session


# --- CLI ---

def _read_cv(path: Path) -> str:
    return extract_cv_text(path.read_bytes(), path.name)


def _write_pdf(text: str, out_path: Path) -> bool:
    try:
        out_path.write_bytes(export_cover_letter_pdf(text))
    except (PdfExportError, OSError) as e:
        logger.error(f"PDF export to {out_path} failed: {e}")
        print(f"❌ {EXPORT_ERROR_MESSAGE}")
        return False
    print(f"✅ Exported PDF: {out_path}")
    return True


def _print_delta(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


async def _generate(args) -> int:
    job_path, cv_path = Path(args.job), Path(args.cv)
    if not job_path.exists():
        print(f"❌ Job description file not found: {job_path}")
        return 1
    if not cv_path.exists():
        print(f"❌ CV file not found: {cv_path}")
        return 1

    try:
        cv_text = _read_cv(cv_path)
    except DocumentExtractionError as e:
        print(f"❌ {e}")
        return 1

    request = GenerationRequest(
        job_description=job_path.read_text(encoding="utf-8", errors="ignore"),
        cv=cv_text,
        tone=args.tone,
        length=args.length,
    )

    async with httpx.AsyncClient(timeout=None) as client:
        assistant = ApplicationAssistant(client, HistoryStore(args.history_file), args.url)
        session = await assistant.submit(request, on_delta=_print_delta)

    if session.state is SessionState.FAILED:
        print(f"\n❌ {session.error}")
        return 1

    print()
    if session.application is None:
        print("⚠️  The model returned an empty cover letter; nothing was saved.")
        return 0

    print(f"\n✅ Fit score: {session.fit_score}%  (saved as {session.application.id})")
    if args.pdf:
        return 0 if _write_pdf(session.cover_letter, Path(args.pdf)) else 1
    return 0


def _history(args) -> int:
    applications = HistoryStore(args.history_file).recent(args.limit)
    if not applications:
        print("No applications yet.")
        return 0
    for application in applications:
        summary = application.job_description[:60].replace("\n", " ")
        print(f"{application.id}  {application.date[:10]}  {application.fit_score:>3}%  {summary}...")
    return 0


def _show(args) -> int:
    application = HistoryStore(args.history_file).get(args.id)
    if application is None:
        print(f"❌ No application with id {args.id}")
        return 1

    print(application.cover_letter)
    print(f"\nFit Score: {application.fit_score}%   Tone: {application.tone}   Length: {application.length}")
    if args.pdf:
        return 0 if _write_pdf(application.cover_letter, Path(args.pdf)) else 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate tailored cover letters and keep a history of applications."
    )
    parser.add_argument(
        "--history-file",
        default=config.HISTORY_PATH,
        help=f"History file (default: {config.HISTORY_PATH})"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen = subparsers.add_parser("generate", help="Generate a cover letter")
    gen.add_argument("--job", required=True, help="Path to job description file (TXT)")
    gen.add_argument("--cv", required=True, help="Path to CV file (PDF, DOCX or TXT)")
    gen.add_argument("--tone", default=Tone.PROFESSIONAL.value, help="Tone: Professional, Friendly or Concise")
    gen.add_argument("--length", default=Length.MEDIUM.value, help="Length: Short, Medium or Long")
    gen.add_argument("--pdf", help="Also export the cover letter to this PDF file")
    gen.add_argument("--url", default=config.GENERATE_URL, help="Generation endpoint URL")

    hist = subparsers.add_parser("history", help="List recent applications")
    hist.add_argument("--limit", type=int, default=config.HISTORY_DISPLAY_LIMIT)

    show = subparsers.add_parser("show", help="Print a stored cover letter")
    show.add_argument("id", help="Application id")
    show.add_argument("--pdf", help="Export the cover letter to this PDF file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface for the assistant."""
    args = build_parser().parse_args(argv)
    setup_logger("client")

    if args.command == "generate":
        return asyncio.run(_generate(args))
    if args.command == "history":
        return _history(args)
    return _show(args)


if __name__ == "__main__":
    sys.exit(main())
