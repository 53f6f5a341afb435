"""Shared pieces of the details and update pipelines."""

from typing import Protocol

from eventscope.data import EventRecord
from eventscope.errors import BadRequest, EventNotFound
from eventscope.pipeline.results import DetailsRunResult, UpdateRunResult
from eventscope.store.base import EventStore


class DetailsRunner(Protocol):
    """Interface for pipelines producing structured event details."""

    async def run(self, event_id: str) -> DetailsRunResult:
        """Search, fetch, synthesize and persist details for an event.

        Never raises; failures are reported on the result.
        """
        ...


class UpdateRunner(Protocol):
    """Interface for pipelines producing incremental event updates."""

    async def run(self, event_id: str) -> UpdateRunResult:
        """Detect, summarize and persist new developments for an event.

        Never raises; failures are reported on the result.
        """
        ...


async def load_event(store: EventStore, event_id: str) -> EventRecord:
    """Resolve an event identifier to its stored record.

    Raises:
        BadRequest: If the identifier is empty.
        EventNotFound: If no record exists or the record has no query.
    """
    if not event_id or not event_id.strip():
        raise BadRequest("event_id is required")

    event = await store.get_event(event_id)
    if event is None:
        raise EventNotFound(f"Event {event_id} not found")
    if not event.query.strip():
        raise EventNotFound(f"Event {event_id} has no search query")
    return event
