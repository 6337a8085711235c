"""
generation_session.py
Client-side state machine for one cover letter generation.

What it does
------------
Drives a single request to /api/generate from submission to a terminal state:

    IDLE -> SUBMITTING -> STREAMING -> COMPLETED | FAILED

The fit score is read from the response header before any body byte is
consumed. Decoded text is accumulated in stream order and pushed to delta
observers as it arrives. A stream that ends with text is recorded in the
history; an empty one completes silently. Transport failures discard the
partial text and leave a generic message for the user, while the cause only
goes to the log.

Usage
-----
  async with httpx.AsyncClient(timeout=None) as client:
      session = GenerationSession(client, HistoryStore())
      session.subscribe(on_delta=lambda text: print(text, end=""))
      application = await session.run(request)
"""

from enum import Enum
from typing import Callable, List, Optional

import httpx
from loguru import logger

import config
from chunk_decoder import decode_chunks
from history_store import HistoryStore
from models import Application, GenerationRequest
from score_fit import clamp_score

VALIDATION_MESSAGE = "Please provide both job description and CV"
GENERATION_ERROR_MESSAGE = "Error generating cover letter. Please try again."


class SessionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = {SessionState.COMPLETED, SessionState.FAILED}


def parse_fit_score_header(value: Optional[str]) -> int:
    """Fit score from the response header; 0 when missing or not an integer."""
    if value is None:
        return 0
    try:
        return clamp_score(int(value.strip()))
    except ValueError:
        return 0


class GenerationSession:
    """One generation, from submission to COMPLETED or FAILED. Not reusable."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        history: HistoryStore,
        endpoint_url: str = config.GENERATE_URL,
    ):
        self.client = client
        self.history = history
        self.endpoint_url = endpoint_url

        self.state = SessionState.IDLE
        self.fit_score = 0
        self.cover_letter = ""
        self.application: Optional[Application] = None
        self.error: Optional[str] = None
        self.error_kind: Optional[str] = None

        self._delta_observers: List[Callable[[str], None]] = []
        self._state_observers: List[Callable[[SessionState], None]] = []

    def subscribe(
        self,
        on_delta: Optional[Callable[[str], None]] = None,
        on_state: Optional[Callable[[SessionState], None]] = None,
    ) -> None:
        if on_delta is not None:
            self._delta_observers.append(on_delta)
        if on_state is not None:
            self._state_observers.append(on_state)

    @property
    def is_active(self) -> bool:
        return self.state in (SessionState.SUBMITTING, SessionState.STREAMING)

    def _transition(self, state: SessionState) -> None:
        logger.debug(f"Session {self.state.value} -> {state.value}")
        self.state = state
        for observer in self._state_observers:
            observer(state)

    def _publish(self, text: str) -> None:
        for observer in self._delta_observers:
            observer(text)

    def _fail(self, kind: str, message: str) -> None:
        self.error_kind = kind
        self.error = message
        self._transition(SessionState.FAILED)

    async def run(self, request: GenerationRequest) -> Optional[Application]:
        """
        Run the generation to a terminal state.

        Returns:
            The new Application when text was generated, otherwise None (empty
            result, validation failure, or transport failure; see state/error)

        Raises:
            RuntimeError: If this session was already started
        """
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"Session already {self.state.value}; start a new session")

        if not request.is_complete():
            self._fail("validation", VALIDATION_MESSAGE)
            return None

        try:
            self._transition(SessionState.SUBMITTING)
            async with self.client.stream(
                "POST", self.endpoint_url, json=request.to_payload()
            ) as response:
                if response.status_code != 200:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise httpx.HTTPStatusError(
                        f"Generation endpoint returned {response.status_code}: {body}",
                        request=response.request,
                        response=response,
                    )

                self.fit_score = parse_fit_score_header(
                    response.headers.get(config.FIT_SCORE_HEADER)
                )
                self._transition(SessionState.STREAMING)

                async for event in decode_chunks(response.aiter_bytes()):
                    if not event.delta_text:
                        continue
                    self.cover_letter += event.delta_text
                    self._publish(event.delta_text)
        except (httpx.HTTPError, httpx.StreamError) as e:
            logger.error(f"Cover letter generation failed: {e}")
            self.cover_letter = ""
            self._fail("generation", GENERATION_ERROR_MESSAGE)
            return None
        except Exception:
            # Bad endpoint URL, failing observer, ...: still end in a terminal state
            logger.exception("Cover letter generation aborted")
            self.cover_letter = ""
            self._fail("generation", GENERATION_ERROR_MESSAGE)
            return None

        if not self.cover_letter:
            logger.info("Generation finished without any text; nothing recorded")
            self._transition(SessionState.COMPLETED)
            return None

        self.application = Application.from_request(request, self.cover_letter, self.fit_score)
        try:
            self.history.append(self.application)
        except OSError as e:
            # The letter is complete and still shown; only the history write is lost
            logger.error(f"Could not save application {self.application.id}: {e}")
        self._transition(SessionState.COMPLETED)
        return self.application
