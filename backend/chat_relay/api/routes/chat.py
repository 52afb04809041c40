"""Chat endpoints for interacting with the LLM."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from chat_relay.api.deps import get_chat_service
from chat_relay.api.errors import error_response
from chat_relay.core.errors import MalformedRequestError
from chat_relay.services.chat import ChatService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"


async def _close_stream(stream: Any) -> None:
    closer = getattr(stream, "aclose", None)
    if closer is not None:
        await closer()


async def _read_json(request: Request) -> Any:
    body = await request.body()
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedRequestError() from exc


@router.post("")
async def chat(
    request: Request,
    service: ChatService = Depends(get_chat_service),
) -> Response:
    """Relay the conversation to the configured model and stream the reply."""

    request_id = uuid.uuid4().hex[:8]
    logger.info("[%s] Chat request received", request_id)
    try:
        payload = await _read_json(request)
        stream = await service.handle(payload)
    except Exception as exc:
        return error_response(exc, request_id=request_id)

    logger.info("[%s] Upstream stream opened", request_id)
    return StreamingResponse(
        stream,
        media_type=STREAM_MEDIA_TYPE,
        headers={"X-Request-ID": request_id},
        background=BackgroundTask(_close_stream, stream),
    )
