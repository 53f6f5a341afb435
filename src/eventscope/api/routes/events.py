"""Read-only views over stored events, details and updates."""

from typing import Any

from fastapi import APIRouter, Depends

from eventscope.api.deps import failure_response, get_components
from eventscope.config import Components
from eventscope.data import EventRecord, EventUpdate
from eventscope.errors import FailureKind
from eventscope.pipeline import RunFailure

router = APIRouter(prefix="/api/events", tags=["events"])


def _event_to_dict(event: EventRecord) -> dict[str, Any]:
    return {
        "event_id": event.event_id,
        "title": event.title,
        "query": event.query,
        "last_updated": event.last_updated_at.isoformat() if event.last_updated_at else None,
    }


def _update_to_dict(update: EventUpdate) -> dict[str, Any]:
    return {
        "event_id": update.event_id,
        "title": update.title,
        "description": update.description,
        "update_date": update.update_date.isoformat(),
    }


@router.get("")
async def list_events(components: Components = Depends(get_components)):
    events = await components.store.list_events()
    return {"events": [_event_to_dict(e) for e in events]}


@router.get("/{event_id}/details")
async def get_event_details(event_id: str, components: Components = Depends(get_components)):
    stored = await components.store.get_details(event_id)
    if stored is None:
        return failure_response(
            RunFailure(FailureKind.NOT_FOUND, f"No details stored for event {event_id}")
        )
    return {
        "event_id": stored.event_id,
        "data": stored.details.to_dict(),
        "created_at": stored.created_at.isoformat() if stored.created_at else None,
        "updated_at": stored.updated_at.isoformat() if stored.updated_at else None,
    }


@router.get("/{event_id}/updates")
async def list_event_updates(event_id: str, components: Components = Depends(get_components)):
    updates = await components.store.list_updates(event_id)
    return {"event_id": event_id, "updates": [_update_to_dict(u) for u in updates]}
