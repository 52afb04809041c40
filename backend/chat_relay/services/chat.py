"""Orchestrates validation, credential checks and the upstream chat call."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterable, Dict, List, Protocol

from chat_relay.core.errors import AuthenticationError
from chat_relay.schemas.chat import ChatRequest, validate_chat_request
from chat_relay.services.credentials import CredentialGate
from chat_relay.services.error_classifier import to_service_error

logger = logging.getLogger(__name__)


class ChatBackend(Protocol):
    async def stream_chat(self, model: str, messages: List[Dict[str, str]]) -> AsyncIterable[str]:
        ...


class ChatService:
    """Relay a validated conversation to the upstream model."""

    def __init__(
        self,
        backend: ChatBackend,
        gate: CredentialGate,
        *,
        model: str,
        max_messages: int,
        max_message_length: int,
    ) -> None:
        self._backend = backend
        self._gate = gate
        self._model = model
        self._max_messages = max_messages
        self._max_message_length = max_message_length

    def validate(self, raw: Any) -> ChatRequest:
        return validate_chat_request(
            raw,
            max_messages=self._max_messages,
            max_message_length=self._max_message_length,
        )

    async def stream_chat(self, request: ChatRequest) -> AsyncIterable[str]:
        """Open the upstream stream for an already validated request."""

        await self._gate.ensure_ready()
        try:
            return await self._backend.stream_chat(self._model, request.as_payload())
        except Exception as exc:
            error = to_service_error(exc)
            if isinstance(error, AuthenticationError):
                self._gate.invalidate()
            if error is exc:
                raise
            raise error from exc

    async def handle(self, raw: Any) -> AsyncIterable[str]:
        request = self.validate(raw)
        logger.debug("Chat request validated: %d messages", len(request.messages))
        return await self.stream_chat(request)
