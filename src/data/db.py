"""
Jam Directory — Jam and Schedule Database.

SQLite-backed storage for jam listings, their weekly schedules and their
date-specific occurrence overrides. Rows are validated through the models
before they are written, so anything read back is already well-formed.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path

from src.core.override_index import AmbiguousOverrideError
from src.data.models import Jam, Override, RecurrenceRule

logger = logging.getLogger(__name__)

_SCHEDULE_FIELDS = ("weekday", "start_time", "end_time", "timezone", "is_active")
_OCCURRENCE_FIELDS = ("start_time", "end_time", "status", "notes")


def _new_id() -> str:
    return uuid.uuid4().hex


class JamDB:
    """SQLite-backed storage for jam listings."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS jams (
                    id                   TEXT PRIMARY KEY,
                    name                 TEXT NOT NULL,
                    city                 TEXT NOT NULL,
                    venue_name           TEXT NOT NULL,
                    venue_address        TEXT NOT NULL DEFAULT '',
                    description          TEXT,
                    skill_level          TEXT,
                    canonical_source_url TEXT,
                    created_at           TEXT NOT NULL
                )
            """)
        logger.debug("Jams table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_jam(row: sqlite3.Row) -> Jam:
        return Jam(
            id=row["id"],
            name=row["name"],
            city=row["city"],
            venue_name=row["venue_name"],
            venue_address=row["venue_address"],
            description=row["description"],
            skill_level=row["skill_level"],
            canonical_source_url=row["canonical_source_url"],
        )

    def add_jam(
        self,
        name: str,
        city: str,
        venue_name: str,
        venue_address: str = "",
        description: str | None = None,
        skill_level: str | None = None,
        canonical_source_url: str | None = None,
    ) -> Jam:
        """Insert a new jam listing. The city is stored lowercased."""
        jam = Jam(
            id=_new_id(),
            name=name.strip(),
            city=city.strip().lower(),
            venue_name=venue_name.strip(),
            venue_address=venue_address.strip(),
            description=description,
            skill_level=skill_level,
            canonical_source_url=canonical_source_url,
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO jams
                    (id, name, city, venue_name, venue_address, description,
                     skill_level, canonical_source_url, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    jam.id, jam.name, jam.city, jam.venue_name, jam.venue_address,
                    jam.description, jam.skill_level, jam.canonical_source_url,
                    datetime.now().isoformat(),
                ),
            )
        logger.info("Jam added: %s '%s' (%s)", jam.id, jam.name, jam.city)
        return jam

    def get_jam(self, jam_id: str) -> Jam | None:
        """Fetch a single jam by ID."""
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM jams WHERE id = ?", (jam_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_jam(row)

    def list_jams(self, city: str | None = None) -> list[Jam]:
        """List jams, optionally limited to one city."""
        query = "SELECT * FROM jams"
        params: list = []
        if city is not None:
            query += " WHERE city = ?"
            params.append(city.strip().lower())
        query += " ORDER BY name"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_jam(r) for r in rows]

    def delete_jam(self, jam_id: str) -> bool:
        """Permanently delete a jam listing."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM jams WHERE id = ?", (jam_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Jam %s deleted", jam_id)
        return deleted


class ScheduleDB:
    """SQLite-backed storage for weekly schedules and occurrence overrides.

    Deleting a schedule never touches that jam's occurrences.
    """

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the schedule and occurrence tables if they don't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS jam_schedules (
                    id         TEXT    PRIMARY KEY,
                    jam_id     TEXT    NOT NULL,
                    weekday    INTEGER NOT NULL,
                    start_time TEXT    NOT NULL,
                    end_time   TEXT,
                    timezone   TEXT    NOT NULL DEFAULT '',
                    is_active  INTEGER NOT NULL DEFAULT 1,
                    position   INTEGER NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS jam_occurrences (
                    id         TEXT PRIMARY KEY,
                    jam_id     TEXT NOT NULL,
                    date       TEXT NOT NULL,
                    start_time TEXT,
                    end_time   TEXT,
                    status     TEXT NOT NULL,
                    notes      TEXT,
                    created_at TEXT NOT NULL,
                    UNIQUE (jam_id, date)
                )
            """)
        logger.debug("Schedule tables initialized at %s", self._db_path)

    @staticmethod
    def _row_to_rule(row: sqlite3.Row) -> RecurrenceRule:
        return RecurrenceRule(
            id=row["id"],
            jam_id=row["jam_id"],
            weekday=row["weekday"],
            start_time=row["start_time"],
            end_time=row["end_time"],
            timezone=row["timezone"],
            is_active=bool(row["is_active"]),
        )

    @staticmethod
    def _row_to_override(row: sqlite3.Row) -> Override:
        return Override(
            id=row["id"],
            jam_id=row["jam_id"],
            date=row["date"],
            start_time=row["start_time"],
            end_time=row["end_time"],
            status=row["status"],
            notes=row["notes"],
        )

    # -- schedules ----------------------------------------------------------

    def add_schedule(
        self,
        jam_id: str,
        weekday: int,
        start_time: str,
        end_time: str | None = None,
        timezone: str = "",
        is_active: bool = True,
    ) -> RecurrenceRule:
        """Insert a weekly schedule. Raises pydantic.ValidationError on bad input."""
        rule = RecurrenceRule(
            id=_new_id(),
            jam_id=jam_id,
            weekday=weekday,
            start_time=start_time,
            end_time=end_time,
            timezone=timezone,
            is_active=is_active,
        )
        with self._connect() as conn:
            # position keeps list order stable; it is the default dedup tie-break
            position = conn.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 FROM jam_schedules WHERE jam_id = ?",
                (jam_id,),
            ).fetchone()[0]
            conn.execute(
                """
                INSERT INTO jam_schedules
                    (id, jam_id, weekday, start_time, end_time, timezone, is_active, position)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    rule.id, rule.jam_id, rule.weekday, rule.start_time,
                    rule.end_time, rule.timezone, int(rule.is_active), position,
                ),
            )
        logger.info(
            "Schedule added: %s for jam %s (weekday %d at %s)",
            rule.id, jam_id, weekday, start_time,
        )
        return rule

    def get_schedules(self, jam_id: str, active_only: bool = False) -> list[RecurrenceRule]:
        """Schedules for a jam in insertion order."""
        query = "SELECT * FROM jam_schedules WHERE jam_id = ?"
        if active_only:
            query += " AND is_active = 1"
        query += " ORDER BY position"
        with self._connect() as conn:
            rows = conn.execute(query, (jam_id,)).fetchall()
        return [self._row_to_rule(r) for r in rows]

    def update_schedule(self, schedule_id: str, **changes: object) -> RecurrenceRule:
        """Update any of weekday/start_time/end_time/timezone/is_active."""
        unknown = set(changes) - set(_SCHEDULE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown schedule fields: {sorted(unknown)}")

        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM jam_schedules WHERE id = ?", (schedule_id,)
            ).fetchone()
            if row is None:
                raise ValueError(f"Schedule {schedule_id} not found")

            current = self._row_to_rule(row)
            rule = RecurrenceRule.model_validate({**current.model_dump(), **changes})
            conn.execute(
                """
                UPDATE jam_schedules
                SET weekday = ?, start_time = ?, end_time = ?, timezone = ?, is_active = ?
                WHERE id = ?
                """,
                (
                    rule.weekday, rule.start_time, rule.end_time,
                    rule.timezone, int(rule.is_active), schedule_id,
                ),
            )
        logger.info("Schedule %s updated: %s", schedule_id, sorted(changes))
        return rule

    def delete_schedule(self, schedule_id: str) -> bool:
        """Permanently delete a schedule. Occurrences are left in place."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM jam_schedules WHERE id = ?", (schedule_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Schedule %s deleted", schedule_id)
        return deleted

    # -- occurrences --------------------------------------------------------

    def add_occurrence(
        self,
        jam_id: str,
        date: str,
        status: str,
        start_time: str | None = None,
        end_time: str | None = None,
        notes: str | None = None,
    ) -> Override:
        """Insert a date override. A jam may have only one override per date."""
        override = Override(
            id=_new_id(),
            jam_id=jam_id,
            date=date,
            start_time=start_time,
            end_time=end_time,
            status=status,
            notes=notes,
        )
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO jam_occurrences
                        (id, jam_id, date, start_time, end_time, status, notes, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        override.id, override.jam_id, override.date, override.start_time,
                        override.end_time, override.status, override.notes, datetime.now().isoformat(),
                    ),
                )
        except sqlite3.IntegrityError as exc:
            raise AmbiguousOverrideError(
                f"Jam {jam_id} already has an override on {date}"
            ) from exc
        logger.info("Occurrence added: %s for jam %s on %s (%s)", override.id, jam_id, date, status)
        return override

    def get_occurrences(self, jam_id: str) -> list[Override]:
        """All overrides for a jam, oldest date first."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM jam_occurrences WHERE jam_id = ? ORDER BY date",
                (jam_id,),
            ).fetchall()
        return [self._row_to_override(r) for r in rows]

    def update_occurrence(self, occurrence_id: str, **changes: object) -> Override:
        """Update any of start_time/end_time/status/notes. The date is fixed."""
        unknown = set(changes) - set(_OCCURRENCE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown occurrence fields: {sorted(unknown)}")

        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM jam_occurrences WHERE id = ?", (occurrence_id,)
            ).fetchone()
            if row is None:
                raise ValueError(f"Occurrence {occurrence_id} not found")

            current = self._row_to_override(row)
            override = Override.model_validate({**current.model_dump(), **changes})
            conn.execute(
                """
                UPDATE jam_occurrences
                SET start_time = ?, end_time = ?, status = ?, notes = ?
                WHERE id = ?
                """,
                (
                    override.start_time, override.end_time,
                    override.status, override.notes, occurrence_id,
                ),
            )
        logger.info("Occurrence %s updated: %s", occurrence_id, sorted(changes))
        return override

    def delete_occurrence(self, occurrence_id: str) -> bool:
        """Permanently delete a date override."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM jam_occurrences WHERE id = ?", (occurrence_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Occurrence %s deleted", occurrence_id)
        return deleted
