"""
Jam Directory — Centralized configuration.

Loads all settings from .env and validates them.
Pure schedule logic in src.core never imports this module; only the
service layer, stores and adapters read it.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Schedule source: "sqlite" | "supabase"
    SCHEDULE_SOURCE: str = "sqlite"

    # SQLite (only needed when SCHEDULE_SOURCE=sqlite)
    DATABASE_PATH: str = "data/jams.db"

    # Hosted store (only needed when SCHEDULE_SOURCE=supabase)
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    # Wall clock used for "now"; rule timezone labels are never converted
    TIMEZONE: str = "America/New_York"

    # Resolution
    UPCOMING_LIMIT: int = 6
    HORIZON_DAYS: int = 365
    TIE_BREAK: str = "input_order"   # or "earliest_start"

    @field_validator("UPCOMING_LIMIT", "HORIZON_DAYS", mode="before")
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        return int(v)

    @field_validator("SCHEDULE_SOURCE", "TIE_BREAK", mode="before")
    @classmethod
    def normalize(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("TIMEZONE")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v!r}") from exc
        return v


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    source = os.getenv("SCHEDULE_SOURCE", "sqlite")
    supabase_url = os.getenv("SUPABASE_URL", "")

    if source.strip().lower() == "supabase" and not supabase_url:
        print("ERROR: SUPABASE_URL is missing but SCHEDULE_SOURCE=supabase", file=sys.stderr)
        sys.exit(1)

    try:
        return Settings(
            SCHEDULE_SOURCE=source,
            DATABASE_PATH=os.getenv("DATABASE_PATH", "data/jams.db"),
            SUPABASE_URL=supabase_url,
            SUPABASE_KEY=os.getenv("SUPABASE_KEY", ""),
            TIMEZONE=os.getenv("TIMEZONE", "America/New_York"),
            UPCOMING_LIMIT=os.getenv("UPCOMING_LIMIT", "6"),
            HORIZON_DAYS=os.getenv("HORIZON_DAYS", "365"),
            TIE_BREAK=os.getenv("TIE_BREAK", "input_order"),
        )
    except ValidationError as exc:
        print(f"ERROR: invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)


# Singleton — imported by service and adapter modules as:
#   from src.config import settings
settings = _load_settings()
