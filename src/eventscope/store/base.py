from datetime import datetime
from typing import Protocol

from eventscope.data import EventDetails, EventRecord, EventUpdate, StoredEventDetails


class EventStore(Protocol):
    """Interface for the key-indexed event record store.

    Implementations raise ``StoreError`` when a read or write fails.
    """

    async def get_event(self, event_id: str) -> EventRecord | None:
        """Load an event's query, title and watermark, or None if unknown."""
        ...

    async def list_events(self) -> list[EventRecord]:
        """All events, most recently updated first."""
        ...

    async def upsert_details(
        self, event_id: str, details: EventDetails, *, timestamp: datetime
    ) -> None:
        """Insert or wholly replace the details record for an event."""
        ...

    async def get_details(self, event_id: str) -> StoredEventDetails | None:
        ...

    async def append_update(self, update: EventUpdate) -> None:
        """Append an update record; existing updates are never modified."""
        ...

    async def list_updates(self, event_id: str) -> list[EventUpdate]:
        """Updates for an event, newest first."""
        ...

    async def advance_watermark(self, event_id: str, timestamp: datetime) -> None:
        """Set the event's ``last_updated_at``."""
        ...
