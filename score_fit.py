# score_fit.py
# Ask the model how well a resume matches a job description and reduce the answer to a 0-100 score.
#
# The score is advisory: it must never block cover letter generation, so every
# failure along the way degrades to 0 instead of raising.
#
# Usage:
#   from score_fit import score_fit, extract_fit_score
#   fit_score = await score_fit(provider, job_description, resume)
#   extract_fit_score("Score: 72 out of 100")  # -> 72

import re
from typing import Optional

from loguru import logger

import config
from llm_provider import CompletionProvider, build_user_prompt

MIN_SCORE = 0
MAX_SCORE = 100

FIT_SCORE_SYSTEM_PROMPT = (
    "You are a helpful assistant that evaluates how well a candidate's resume matches "
    "a job description. Respond ONLY with a number from 0 to 100 representing the fit "
    "score, where 100 is a perfect match."
)

# ASCII digits only; a model answering in other numerals scores 0
_DIGIT_RUN = re.compile(r"[0-9]+")


def clamp_score(value: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, value))


def extract_fit_score(text: Optional[str]) -> int:
    """
    Pull the fit score out of free model text.

    Takes the first run of digits anywhere in the text, falls back to 0 when
    there is none, and clamps the result into [0, 100].
    """
    match = _DIGIT_RUN.search(text or "")
    digits = (match.group(0) if match else "0").lstrip("0") or "0"
    # Anything past three digits is above the ceiling; skip int() on huge runs
    if len(digits) > 3:
        return MAX_SCORE
    return clamp_score(int(digits))


async def score_fit(provider: CompletionProvider, job_description: str, resume: str) -> int:
    """
    Score the fit between a job description and a resume.

    Returns:
        Integer in [0, 100]; 0 when the model call fails or returns no number
    """
    try:
        text = await provider.complete(
            FIT_SCORE_SYSTEM_PROMPT,
            build_user_prompt(job_description, resume),
            temperature=config.SCORING_TEMPERATURE,
            max_tokens=config.SCORING_MAX_TOKENS,
        )
        score = extract_fit_score(text)
    except Exception as e:
        logger.warning(f"Fit scoring failed, defaulting to 0: {e}")
        return MIN_SCORE

    logger.debug(f"Fit score {score} from model text {text!r}")
    return score
