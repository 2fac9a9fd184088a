"""SQLite schedule adapter — implements ScheduleSource.

Wraps a ScheduleDB instance to satisfy the ScheduleSource protocol.
"""

from __future__ import annotations

import logging
import sqlite3

from src.data.db import ScheduleDB
from src.data.models import Override, RecurrenceRule
from src.ports.schedule_port import ScheduleSourceError

logger = logging.getLogger(__name__)


class SQLiteScheduleSource:
    """SQLite implementation of ScheduleSource."""

    def __init__(self, db: ScheduleDB | None = None) -> None:
        self._db = db or ScheduleDB()

    async def get_schedules(self, jam_id: str) -> list[RecurrenceRule]:
        try:
            return self._db.get_schedules(jam_id)
        except sqlite3.Error as exc:
            raise ScheduleSourceError(f"Failed to load schedules for {jam_id}: {exc}") from exc

    async def get_occurrences(self, jam_id: str) -> list[Override]:
        try:
            return self._db.get_occurrences(jam_id)
        except sqlite3.Error as exc:
            raise ScheduleSourceError(f"Failed to load occurrences for {jam_id}: {exc}") from exc
