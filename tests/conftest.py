"""Shared fixtures: an in-memory model provider and the sample stream used across tests."""

import pytest

from llm_provider import CompletionProvider

SAMPLE_STREAM_LINES = [
    '{"choices":[{"delta":{"content":"Dear"}}]}',
    "not-json",
    '{"choices":[{"delta":{"content":" Hiring Manager,"}}]}',
]


class FakeProvider(CompletionProvider):
    """Provider that answers from canned text and records every call."""

    def __init__(self, score_text="72", lines=(), score_error=None, stream_error=None):
        self.score_text = score_text
        self.lines = list(lines)
        self.score_error = score_error
        self.stream_error = stream_error
        self.calls = []

    async def complete(self, system_prompt, user_prompt, *, temperature=None, max_tokens=None):
        self.calls.append(
            {
                "op": "complete",
                "system": system_prompt,
                "user": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.score_error is not None:
            raise self.score_error
        return self.score_text

    async def open_stream(self, system_prompt, user_prompt):
        self.calls.append({"op": "open_stream", "system": system_prompt, "user": user_prompt})
        if self.stream_error is not None:
            raise self.stream_error
        return self._iterate()

    async def _iterate(self):
        for line in self.lines:
            yield (line + "\n").encode("utf-8")


@pytest.fixture
def fake_provider_cls():
    return FakeProvider


@pytest.fixture
def sample_stream_lines():
    return list(SAMPLE_STREAM_LINES)


@pytest.fixture
def sample_stream_body(sample_stream_lines):
    return ("\n".join(sample_stream_lines) + "\n").encode("utf-8")
