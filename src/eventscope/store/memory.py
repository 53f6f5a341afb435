"""Dict-backed event store for tests and local runs."""

import dataclasses
from datetime import datetime

from eventscope.data import EventDetails, EventRecord, EventUpdate, StoredEventDetails
from eventscope.errors import StoreError


class InMemoryEventStore:
    """Keep events, details and updates in process memory.

    Args:
        events: Optional events to seed the store with.
    """

    def __init__(self, events: list[EventRecord] | None = None) -> None:
        self._events: dict[str, EventRecord] = {e.event_id: e for e in events or []}
        self._details: dict[str, StoredEventDetails] = {}
        self._updates: dict[str, list[EventUpdate]] = {}

    def add_event(self, event: EventRecord) -> None:
        self._events[event.event_id] = event

    async def get_event(self, event_id: str) -> EventRecord | None:
        return self._events.get(event_id)

    async def list_events(self) -> list[EventRecord]:
        def sort_key(event: EventRecord) -> float:
            return event.last_updated_at.timestamp() if event.last_updated_at else 0.0

        return sorted(self._events.values(), key=sort_key, reverse=True)

    async def upsert_details(
        self, event_id: str, details: EventDetails, *, timestamp: datetime
    ) -> None:
        existing = self._details.get(event_id)
        created_at = existing.created_at if existing else timestamp
        self._details[event_id] = StoredEventDetails(
            event_id=event_id,
            details=details,
            created_at=created_at,
            updated_at=timestamp,
        )

    async def get_details(self, event_id: str) -> StoredEventDetails | None:
        return self._details.get(event_id)

    async def append_update(self, update: EventUpdate) -> None:
        self._updates.setdefault(update.event_id, []).append(update)

    async def list_updates(self, event_id: str) -> list[EventUpdate]:
        updates = self._updates.get(event_id, [])
        return sorted(updates, key=lambda u: u.update_date, reverse=True)

    async def advance_watermark(self, event_id: str, timestamp: datetime) -> None:
        event = self._events.get(event_id)
        if event is None:
            raise StoreError(f"Cannot advance watermark of unknown event {event_id}")
        self._events[event_id] = dataclasses.replace(event, last_updated_at=timestamp)
