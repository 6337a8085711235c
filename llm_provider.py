"""
llm_provider.py
Model provider abstraction for the generation endpoint.

What it does
------------
Hides the model provider behind two operations so the scoring and cover letter
code never touch a provider SDK directly:

  - complete():    produce a bounded text completion
  - open_stream(): produce an open stream of raw protocol bytes

The stream format is newline-delimited JSON, one serialized chat-completion
chunk per line, so each line carries `choices[0].delta.content`.

Usage
-----
  from llm_provider import get_provider
  provider = get_provider()
  text = await provider.complete(system_prompt, user_prompt, temperature=0, max_tokens=10)
  stream = await provider.open_stream(system_prompt, user_prompt)
  async for raw in stream:
      ...
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from loguru import logger
from openai import AsyncOpenAI

import config


def build_user_prompt(job_description: str, resume: str) -> str:
    """User message shared by the scoring and the cover letter calls."""
    return f"Job Description:\n{job_description}\n\nResume:\n{resume}"


class CompletionProvider(ABC):
    """Abstract base for model providers."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Return the full text of a single non-streamed completion."""

    @abstractmethod
    async def open_stream(self, system_prompt: str, user_prompt: str) -> AsyncIterator[bytes]:
        """
        Open a streamed completion.

        The request is issued before this coroutine returns, so setup failures
        raise here rather than on the first read.
        """


class OpenAIProvider(CompletionProvider):
    """CompletionProvider backed by the OpenAI chat completions API."""

    def __init__(self, api_key: str, model: str = config.OPENAI_MODEL):
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        kwargs = {}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            **kwargs,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def open_stream(self, system_prompt: str, user_prompt: str) -> AsyncIterator[bytes]:
        stream = await self.client.chat.completions.create(
            model=self.model,
            stream=True,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        logger.debug(f"Opened completion stream on {self.model}")
        return _serialize_chunks(stream)


async def _serialize_chunks(stream) -> AsyncIterator[bytes]:
    """Forward each chunk as one JSON line."""
    async for chunk in stream:
        yield (chunk.model_dump_json() + "\n").encode("utf-8")


def get_provider() -> CompletionProvider:
    """
    Build the provider configured in the environment.

    Raises:
        RuntimeError: If OPENAI_API_KEY is not set
    """
    if not config.OPENAI_API_KEY:
        raise RuntimeError("OPENAI_API_KEY missing in environment.")
    return OpenAIProvider(api_key=config.OPENAI_API_KEY, model=config.OPENAI_MODEL)
