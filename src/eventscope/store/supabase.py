"""Supabase-backed event store."""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from eventscope.data import EventDetails, EventRecord, EventUpdate, StoredEventDetails
from eventscope.errors import ConfigurationError, StoreError

logger = logging.getLogger(__name__)


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable timestamp in store row: %r", value)
        return None


def _event_from_row(row: dict[str, Any]) -> EventRecord:
    return EventRecord(
        event_id=str(row["event_id"]),
        query=str(row.get("query") or ""),
        title=str(row.get("title") or ""),
        last_updated_at=_parse_timestamp(row.get("last_updated")),
    )


def _update_from_row(row: dict[str, Any]) -> EventUpdate | None:
    update_date = _parse_timestamp(row.get("update_date"))
    if update_date is None:
        return None
    return EventUpdate(
        event_id=str(row["event_id"]),
        title=str(row.get("title") or ""),
        description=str(row.get("description") or ""),
        update_date=update_date,
    )


class SupabaseEventStore:
    """Event store on top of three Supabase tables.

    ``events`` holds the query, title and ``last_updated`` watermark,
    ``event_details`` one row per event, ``event_updates`` an append-only log.
    The supabase client is synchronous, so every request runs in a worker
    thread.

    Args:
        client: Supabase client.
        events_table: Table with event metadata.
        details_table: Table with synthesized details.
        updates_table: Table with incremental updates.
    """

    def __init__(
        self,
        client: Client,
        *,
        events_table: str = "events",
        details_table: str = "event_details",
        updates_table: str = "event_updates",
    ) -> None:
        self._client = client
        self._events_table = events_table
        self._details_table = details_table
        self._updates_table = updates_table

    @classmethod
    def from_env(
        cls,
        *,
        url_env: str = "SUPABASE_URL",
        key_env: str = "SUPABASE_SERVICE_ROLE_KEY",
        **kwargs: Any,
    ) -> SupabaseEventStore:
        url = os.environ.get(url_env)
        key = os.environ.get(key_env)
        if not url or not key:
            raise ConfigurationError(f"Supabase credentials required. Set {url_env} and {key_env}.")
        return cls(create_client(url, key), **kwargs)

    async def _execute(self, builder: Any, action: str) -> list[dict[str, Any]]:
        try:
            result = await asyncio.to_thread(builder.execute)
        except (APIError, httpx.HTTPError) as e:
            logger.error("Store request failed (%s): %s", action, e)
            raise StoreError(f"Failed to {action}: {e}") from e
        return result.data or []

    async def get_event(self, event_id: str) -> EventRecord | None:
        rows = await self._execute(
            self._client.table(self._events_table)
            .select("event_id, query, title, last_updated")
            .eq("event_id", event_id)
            .limit(1),
            "fetch event",
        )
        return _event_from_row(rows[0]) if rows else None

    async def list_events(self) -> list[EventRecord]:
        rows = await self._execute(
            self._client.table(self._events_table)
            .select("event_id, query, title, last_updated")
            .order("last_updated", desc=True),
            "list events",
        )
        return [_event_from_row(row) for row in rows]

    async def upsert_details(
        self, event_id: str, details: EventDetails, *, timestamp: datetime
    ) -> None:
        existing = await self._execute(
            self._client.table(self._details_table)
            .select("event_id")
            .eq("event_id", event_id)
            .limit(1),
            "check event details",
        )

        row = {**details.to_dict(), "updated_at": timestamp.isoformat()}
        if existing:
            logger.info("Updating existing details for event %s", event_id)
            builder = self._client.table(self._details_table).update(row).eq("event_id", event_id)
        else:
            logger.info("Inserting details for event %s", event_id)
            row.update({"event_id": event_id, "created_at": timestamp.isoformat()})
            builder = self._client.table(self._details_table).insert(row)
        await self._execute(builder, "save event details")

    async def get_details(self, event_id: str) -> StoredEventDetails | None:
        rows = await self._execute(
            self._client.table(self._details_table).select("*").eq("event_id", event_id).limit(1),
            "fetch event details",
        )
        if not rows:
            return None
        row = rows[0]
        return StoredEventDetails(
            event_id=str(row["event_id"]),
            details=EventDetails.from_dict(row),
            created_at=_parse_timestamp(row.get("created_at")),
            updated_at=_parse_timestamp(row.get("updated_at")),
        )

    async def append_update(self, update: EventUpdate) -> None:
        await self._execute(
            self._client.table(self._updates_table).insert(
                {
                    "event_id": update.event_id,
                    "title": update.title,
                    "description": update.description,
                    "update_date": update.update_date.isoformat(),
                }
            ),
            "insert event update",
        )

    async def list_updates(self, event_id: str) -> list[EventUpdate]:
        rows = await self._execute(
            self._client.table(self._updates_table)
            .select("*")
            .eq("event_id", event_id)
            .order("update_date", desc=True),
            "list event updates",
        )
        updates = [_update_from_row(row) for row in rows]
        return [u for u in updates if u is not None]

    async def advance_watermark(self, event_id: str, timestamp: datetime) -> None:
        await self._execute(
            self._client.table(self._events_table)
            .update({"last_updated": timestamp.isoformat()})
            .eq("event_id", event_id),
            "update event timestamp",
        )
