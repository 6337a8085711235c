# history_store.py
# Append-only, newest-first log of completed applications, persisted as one JSON file.

import json
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

import config
from models import Application


class HistoryStore:
    """
    Local history of generated applications.

    The file holds a JSON list of application records, newest first. It is read
    once, on first use, and rewritten whole after every append. A missing,
    unreadable, or corrupted file counts as an empty history.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or config.HISTORY_PATH)
        self._applications: Optional[List[Application]] = None

    def load(self) -> List[Application]:
        if self._applications is None:
            self._applications = self._read()
        return list(self._applications)

    @property
    def applications(self) -> List[Application]:
        return self.load()

    def recent(self, limit: int = config.HISTORY_DISPLAY_LIMIT) -> List[Application]:
        return self.load()[:limit]

    def get(self, application_id: str) -> Optional[Application]:
        for application in self.load():
            if application.id == application_id:
                return application
        return None

    def append(self, application: Application) -> None:
        """Insert at the head and persist the whole log."""
        applications = [application] + self.load()
        self._write(applications)
        self._applications = applications
        logger.info(f"Saved application {application.id} (fit score {application.fit_score})")

    def _read(self) -> List[Application]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                records = json.load(f)
            if not isinstance(records, list):
                raise ValueError(f"expected a list, got {type(records).__name__}")
            return [Application.from_dict(record) for record in records]
        except (OSError, ValueError, KeyError, TypeError, OverflowError, RecursionError) as e:
            logger.warning(f"Ignoring unreadable history at {self.path}: {e}")
            return []

    def _write(self, applications: List[Application]) -> None:
        # Temp file + os.replace so a crash never leaves a half-written log
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump([a.to_dict() for a in applications], f, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.path)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise
