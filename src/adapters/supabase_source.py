"""Hosted schedule adapter — implements ScheduleSource over PostgREST.

Reads the ``jam_schedules`` and ``jam_occurrences`` tables of a Supabase
project through its REST endpoint. Read-only: editing happens in the hosted
dashboard or through ScheduleDB for local data.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from src.data.models import Override, RecurrenceRule
from src.ports.schedule_port import ScheduleSourceError

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 10


class SupabaseScheduleSource:
    """PostgREST implementation of ScheduleSource."""

    def __init__(self, base_url: str, api_key: str) -> None:
        self._rest_url = base_url.rstrip("/") + "/rest/v1"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    async def _select(
        self, table: str, jam_id: str, order: str | None = None,
    ) -> list[dict]:
        params = {"jam_id": f"eq.{jam_id}", "select": "*"}
        if order is not None:
            params["order"] = order
        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT_SECONDS) as client:
                resp = await client.get(
                    f"{self._rest_url}/{table}",
                    params=params,
                    headers=self._headers,
                )
                resp.raise_for_status()
                rows = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ScheduleSourceError(f"Failed to fetch {table} for {jam_id}: {exc}") from exc

        if not isinstance(rows, list):
            raise ScheduleSourceError(f"Unexpected {table} payload for {jam_id}: {rows!r}")
        logger.debug("Fetched %d %s rows for jam %s", len(rows), table, jam_id)
        return rows

    async def get_schedules(self, jam_id: str) -> list[RecurrenceRule]:
        # Unordered: rows come back in storage (insertion) order.
        rows = await self._select("jam_schedules", jam_id)
        try:
            return [RecurrenceRule.model_validate(_drop_nulls(row)) for row in rows]
        except ValidationError as exc:
            raise ScheduleSourceError(f"Malformed schedule row for {jam_id}: {exc}") from exc

    async def get_occurrences(self, jam_id: str) -> list[Override]:
        rows = await self._select("jam_occurrences", jam_id, order="date.asc")
        try:
            return [Override.model_validate(_drop_nulls(row)) for row in rows]
        except ValidationError as exc:
            raise ScheduleSourceError(f"Malformed occurrence row for {jam_id}: {exc}") from exc


def _drop_nulls(row: dict) -> dict:
    """Null columns fall back to the model defaults."""
    return {k: v for k, v in row.items() if v is not None}
