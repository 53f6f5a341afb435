"""FastAPI application exposing the pipelines."""

import logging
import os
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from eventscope.api.deps import failure_response
from eventscope.api.routes import events, search
from eventscope.config import Components, create_from_config, get_default_config_path, load_config
from eventscope.errors import PipelineError
from eventscope.pipeline import RunFailure

logger = logging.getLogger(__name__)

API_SECRET_ENV = "API_SECRET_KEY"
CONFIG_PATH_ENV = "EVENTSCOPE_CONFIG"


def create_app(components: Components, api_secret: str | None) -> FastAPI:
    """Build the app around already-constructed components.

    Args:
        components: Store and pipelines shared by every request.
        api_secret: Shared secret required by the run endpoints.
    """
    if not api_secret:
        logger.warning("No API secret configured; run endpoints will reject every request")

    app = FastAPI(
        title="eventscope",
        description="Event details synthesis and incremental updates",
        version="0.1.0",
    )
    app.state.components = components
    app.state.api_secret = api_secret

    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return failure_response(RunFailure.from_exception(exc))

    app.include_router(search.router)
    app.include_router(events.router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "service": "eventscope"}

    return app


def create_app_from_env() -> FastAPI:
    """App factory for ``uvicorn --factory``; config path from EVENTSCOPE_CONFIG."""
    config_path = Path(os.environ.get(CONFIG_PATH_ENV) or get_default_config_path())
    components = create_from_config(load_config(config_path))
    return create_app(components, os.environ.get(API_SECRET_ENV))
