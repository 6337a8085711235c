# models.py
# Data shapes shared by the generation endpoint, the client session and the history store.

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict


class Tone(str, Enum):
    PROFESSIONAL = "Professional"
    FRIENDLY = "Friendly"
    CONCISE = "Concise"


class Length(str, Enum):
    SHORT = "Short"
    MEDIUM = "Medium"
    LONG = "Long"


@dataclass
class GenerationRequest:
    """Form fields for one cover letter generation."""

    job_description: str
    cv: str
    tone: str = Tone.PROFESSIONAL.value
    length: str = Length.MEDIUM.value

    def is_complete(self) -> bool:
        """Both the job description and the CV carry text once trimmed."""
        return bool(self.job_description.strip()) and bool(self.cv.strip())

    def to_payload(self) -> Dict[str, str]:
        # The CV travels as "resume" on the wire
        return {
            "jobDescription": self.job_description,
            "resume": self.cv,
            "tone": _enum_value(self.tone),
            "length": _enum_value(self.length),
        }


@dataclass(frozen=True)
class GenerationChunkEvent:
    delta_text: str = ""


def _new_application_id() -> str:
    return uuid.uuid4().hex


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Application:
    """A completed cover letter generation, as stored in the history log."""

    job_description: str
    cv: str
    cover_letter: str
    fit_score: int
    tone: str
    length: str
    id: str = field(default_factory=_new_application_id)
    date: str = field(default_factory=_utc_now)

    @classmethod
    def from_request(
        cls, request: GenerationRequest, cover_letter: str, fit_score: int
    ) -> "Application":
        return cls(
            job_description=request.job_description,
            cv=request.cv,
            cover_letter=cover_letter,
            fit_score=fit_score,
            tone=_enum_value(request.tone),
            length=_enum_value(request.length),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Application":
        """
        Rebuild a record read back from the history file.

        Raises:
            KeyError: If a required field is missing
            TypeError / ValueError: If a field has the wrong shape
        """
        return cls(
            id=str(data["id"]),
            job_description=str(data["job_description"]),
            cv=str(data["cv"]),
            cover_letter=str(data["cover_letter"]),
            fit_score=int(data["fit_score"]),
            tone=str(data["tone"]),
            length=str(data["length"]),
            date=str(data["date"]),
        )


def _enum_value(value: Any) -> str:
    return value.value if isinstance(value, Enum) else value
