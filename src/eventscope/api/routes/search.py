"""Endpoints that trigger details and update runs."""

from typing import Literal

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from eventscope.api.deps import failure_response, get_components, secret_matches
from eventscope.config import Components
from eventscope.errors import FailureKind
from eventscope.pipeline import RunFailure

router = APIRouter(prefix="/api/search", tags=["search"])


class RunRequest(BaseModel):
    """JSON body accepted by the POST variants."""

    event_id: str | int | None = None
    api_key: str | None = None


async def _run(
    kind: Literal["details", "updates"],
    request: Request,
    components: Components,
    event_id: str | int | None,
    api_key: str | None,
) -> JSONResponse:
    if not secret_matches(request, api_key):
        return failure_response(RunFailure(FailureKind.UNAUTHORIZED, "Invalid API key"))

    event_id = str(event_id).strip() if event_id is not None else ""
    if not event_id:
        return failure_response(RunFailure(FailureKind.BAD_REQUEST, "event_id is required"))

    if kind == "details":
        result = await components.details_pipeline.run(event_id)
    else:
        result = await components.update_pipeline.run(event_id)

    if result.failure is not None:
        return failure_response(result.failure, event_id=event_id)
    return JSONResponse(content=result.to_summary())


@router.get("/details")
async def search_details(
    request: Request,
    event_id: str | None = Query(default=None),
    api_key: str | None = Query(default=None),
    x_api_key: str | None = Header(default=None),
    components: Components = Depends(get_components),
) -> JSONResponse:
    """Run the details pipeline for an event."""
    return await _run("details", request, components, event_id, api_key or x_api_key)


@router.post("/details")
async def search_details_post(
    request: Request,
    body: RunRequest | None = None,
    x_api_key: str | None = Header(default=None),
    components: Components = Depends(get_components),
) -> JSONResponse:
    body = body or RunRequest()
    return await _run("details", request, components, body.event_id, body.api_key or x_api_key)


@router.get("/updates")
async def search_updates(
    request: Request,
    event_id: str | None = Query(default=None),
    api_key: str | None = Query(default=None),
    x_api_key: str | None = Header(default=None),
    components: Components = Depends(get_components),
) -> JSONResponse:
    """Check an event for news newer than its watermark."""
    return await _run("updates", request, components, event_id, api_key or x_api_key)


@router.post("/updates")
async def search_updates_post(
    request: Request,
    body: RunRequest | None = None,
    x_api_key: str | None = Header(default=None),
    components: Components = Depends(get_components),
) -> JSONResponse:
    body = body or RunRequest()
    return await _run("updates", request, components, body.event_id, body.api_key or x_api_key)
