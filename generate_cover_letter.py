"""
generate_cover_letter.py
Cover Letter Generator - Streaming LLM Call

What it does
------------
Opens a streamed completion that writes a tailored cover letter from a job
description and a resume. Tone and length shape the system instruction; the
model output is handed back untouched as a raw byte stream so the endpoint can
forward it as-is.

Tone and length are not validated against the known choices. Unset or blank
values fall back to "professional" / "medium"; anything else is lower-cased and
written into the instruction literally.

API:
  from generate_cover_letter import open_cover_letter_stream
  stream = await open_cover_letter_stream(provider, job_text, resume_text, "Friendly", "Short")
"""

from typing import AsyncIterator, Optional

from loguru import logger

from llm_provider import CompletionProvider, build_user_prompt
from models import Length, Tone

DEFAULT_TONE = Tone.PROFESSIONAL.value.lower()
DEFAULT_LENGTH = Length.MEDIUM.value.lower()

_KNOWN_TONES = {tone.value.lower() for tone in Tone}
_KNOWN_LENGTHS = {length.value.lower() for length in Length}


def _normalize_choice(value: Optional[str], default: str, known: set, label: str) -> str:
    text = ("" if value is None else str(value)).strip().lower()
    if not text:
        return default
    if text not in known:
        logger.debug(f"Passing unrecognized {label} {value!r} through to the prompt")
    return text


def build_cover_letter_prompt(tone: Optional[str] = None, length: Optional[str] = None) -> str:
    """
    Build the system instruction for the cover letter call.

    Args:
        tone: Requested tone (e.g., "Friendly"). Defaults to professional.
        length: Requested length (e.g., "Short"). Defaults to medium.

    Returns:
        System prompt text
    """
    tone_text = _normalize_choice(tone, DEFAULT_TONE, _KNOWN_TONES, "tone")
    length_text = _normalize_choice(length, DEFAULT_LENGTH, _KNOWN_LENGTHS, "length")

    return (
        "You are a professional cover letter writer. Generate a tailored cover letter "
        "based on the job description and CV provided. "
        f"The cover letter should have a {tone_text} tone and be {length_text} in length. "
        "Focus on matching the candidate's experience with the job requirements and "
        "maintain the specified tone and length."
    )


async def open_cover_letter_stream(
    provider: CompletionProvider,
    job_description: str,
    resume: str,
    tone: Optional[str] = None,
    length: Optional[str] = None,
) -> AsyncIterator[bytes]:
    """
    Start streaming a cover letter.

    Single attempt: a provider failure while opening the stream propagates to
    the caller, and so does any failure while it is being read.

    Returns:
        Async iterator of raw protocol bytes (newline-delimited JSON chunks)
    """
    system_prompt = build_cover_letter_prompt(tone, length)
    return await provider.open_stream(system_prompt, build_user_prompt(job_description, resume))
