"""Request dependencies shared by the API routes."""

import hmac
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from eventscope.config import Components
from eventscope.errors import FailureKind
from eventscope.pipeline import RunFailure

logger = logging.getLogger(__name__)

REDACTED_MESSAGE = "Internal server error"

_STATUS_BY_KIND = {
    FailureKind.UNAUTHORIZED: 401,
    FailureKind.BAD_REQUEST: 400,
    FailureKind.NOT_FOUND: 404,
}


def get_components(request: Request) -> Components:
    return request.app.state.components


def secret_matches(request: Request, supplied: str | None) -> bool:
    """Compare a caller-supplied secret with the configured one in constant time.

    An unconfigured secret rejects every caller.
    """
    expected: str | None = request.app.state.api_secret
    if not expected or not supplied:
        return False
    return hmac.compare_digest(supplied.encode(), expected.encode())


def status_for(kind: FailureKind) -> int:
    return _STATUS_BY_KIND.get(kind, 500)


def failure_response(failure: RunFailure, **extra: object) -> JSONResponse:
    """Error payload for a failure; 5xx messages are redacted."""
    status = status_for(failure.kind)
    if status >= 500:
        message = REDACTED_MESSAGE
    else:
        message = failure.message
    return JSONResponse(
        status_code=status,
        content={"success": False, "error": message, "kind": str(failure.kind), **extra},
    )
