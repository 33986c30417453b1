"""Persistence of finished schedules, one JSON file per target date."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Protocol

from ridematch.io.adapters import record_to_json
from ridematch.io.schemas import ScheduleRecord


class ScheduleStore(Protocol):
    """Anything that can keep schedules keyed by their target date."""

    def save(self, record: ScheduleRecord) -> None: ...

    def load(self, target_date: date) -> ScheduleRecord | None: ...


class JsonScheduleStore:
    """Stores each schedule as ``<directory>/schedule_<YYYY-MM-DD>.json``.

    Saving a record for a date that already has one replaces it.

    Attributes:
        directory: Folder holding the schedule files. Created on first save.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, target_date: date) -> Path:
        return self.directory / f"schedule_{target_date.isoformat()}.json"

    def save(self, record: ScheduleRecord) -> Path:
        """Write ``record`` and return the file path."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(record.target_date)
        path.write_text(record_to_json(record))
        return path

    def load(self, target_date: date) -> ScheduleRecord | None:
        """Read the schedule stored for ``target_date``, if any.

        Raises:
            pydantic.ValidationError: If the stored file is malformed.
        """
        path = self.path_for(target_date)
        if not path.exists():
            return None
        return ScheduleRecord.model_validate_json(path.read_text())

    def dates(self) -> list[date]:
        """Target dates with a stored schedule, oldest first."""
        if not self.directory.exists():
            return []
        found = []
        for path in self.directory.glob("schedule_*.json"):
            try:
                found.append(date.fromisoformat(path.stem.removeprefix("schedule_")))
            except ValueError:
                continue
        return sorted(found)
