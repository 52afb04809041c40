"""Render service errors as uniform JSON responses."""

from __future__ import annotations

import logging
from typing import Any

from fastapi.responses import JSONResponse

from chat_relay.core.errors import ChatRelayError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error. Please try again later."


def render_error(exc: BaseException) -> tuple[dict[str, Any], int]:
    """Return the JSON body and status code for ``exc``."""

    if isinstance(exc, ChatRelayError):
        return {"error": exc.message}, exc.status_code
    return {"error": INTERNAL_ERROR_MESSAGE}, 500


def error_response(exc: BaseException, *, request_id: str | None = None) -> JSONResponse:
    body, status_code = render_error(exc)
    prefix = f"[{request_id}] " if request_id else ""
    if isinstance(exc, ChatRelayError):
        logger.info("%sReturning %s %s: %s", prefix, status_code, type(exc).__name__, exc.message)
    else:
        logger.error("%sUnhandled error while serving chat request", prefix, exc_info=exc)
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(body, status_code=status_code, headers=headers)
