"""
Jam Directory — Data Models.

A jam is a recurring live-music event. Its regular schedule is a set of
weekly rules; date-specific exceptions (cancellations, time changes, one-off
extra sessions) are stored as sparse occurrence overrides.

Rules and overrides arrive from storage as plain rows with ISO strings, so
they are validated on construction and frozen for the duration of a
resolution call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

from src.core.timepoint import parse_date, parse_time, validate_weekday

OverrideStatus = Literal["created", "cancelled", "moved"]

OVERRIDE_STATUSES: tuple[str, ...] = ("created", "cancelled", "moved")

DEFAULT_START_TIME = "19:00"


@dataclass
class Jam:
    """A jam session listing (venue and description only, no schedule)."""

    id: str
    name: str
    city: str
    venue_name: str
    venue_address: str = ""
    description: str | None = None
    skill_level: str | None = None
    canonical_source_url: str | None = None


class RecurrenceRule(BaseModel):
    """A weekly schedule entry for a jam.

    JSON example:
    {
        "id": "s1",
        "jam_id": "j1",
        "weekday": 4,
        "start_time": "19:00",
        "end_time": "22:00",
        "timezone": "America/New_York",
        "is_active": true
    }
    """
    model_config = ConfigDict(frozen=True)

    id: str = ""
    jam_id: str = ""
    weekday: int           # 0=Sunday .. 6=Saturday
    start_time: str        # HH:MM or HH:MM:SS
    end_time: str | None = None
    timezone: str = ""     # carried, never converted
    is_active: bool = True

    @field_validator("weekday", mode="before")
    @classmethod
    def check_weekday(cls, v: int) -> int:
        return validate_weekday(v)

    @field_validator("start_time")
    @classmethod
    def check_start_time(cls, v: str) -> str:
        parse_time(v)
        return v

    @field_validator("end_time")
    @classmethod
    def check_end_time(cls, v: str | None) -> str | None:
        if v is not None:
            parse_time(v)
        return v


class Override(BaseModel):
    """A date-specific exception to a jam's weekly schedule.

    JSON example:
    {
        "id": "o1",
        "jam_id": "j1",
        "date": "2025-02-13",
        "start_time": "20:00",
        "end_time": null,
        "status": "moved",
        "notes": "Late start, house band soundcheck"
    }
    """
    model_config = ConfigDict(frozen=True)

    id: str = ""
    jam_id: str = ""
    date: str                       # YYYY-MM-DD
    start_time: str | None = None
    end_time: str | None = None
    status: OverrideStatus
    notes: str | None = None

    @field_validator("date")
    @classmethod
    def check_date(cls, v: str) -> str:
        parse_date(v)
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, v: str | None) -> str | None:
        if v is not None:
            parse_time(v)
        return v
