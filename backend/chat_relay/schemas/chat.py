"""Pydantic schemas and validation for chat endpoints."""

from __future__ import annotations

from typing import Any, List, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from chat_relay.core.errors import InputValidationError

MAX_MESSAGE_LENGTH = 500
MAX_MESSAGES = 50

_CUSTOM_ERRORS = frozenset({"content_empty", "content_too_long", "messages_empty", "messages_too_many"})


def _limit(info: ValidationInfo, key: str, default: int) -> int:
    context = info.context or {}
    value = context.get(key)
    return int(value) if value is not None else default


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"] = Field(..., description="Author of the message")
    content: str = Field(..., description="Message text")

    @field_validator("content")
    @classmethod
    def _check_content(cls, value: str, info: ValidationInfo) -> str:
        if not value:
            raise PydanticCustomError("content_empty", "Message content cannot be empty")
        limit = _limit(info, "max_message_length", MAX_MESSAGE_LENGTH)
        if len(value) > limit:
            raise PydanticCustomError(
                "content_too_long",
                "Message content cannot exceed {limit} characters",
                {"limit": limit},
            )
        return value


class ChatRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    messages: List[ChatMessage] = Field(..., description="Conversation in turn order")

    @field_validator("messages", mode="before")
    @classmethod
    def _check_count(cls, value: Any, info: ValidationInfo) -> Any:
        # runs before the items are validated; non-lists fail the list check afterwards
        if isinstance(value, (list, tuple)):
            if not value:
                raise PydanticCustomError("messages_empty", "At least one message is required")
            if len(value) > _limit(info, "max_messages", MAX_MESSAGES):
                raise PydanticCustomError("messages_too_many", "Too many messages in conversation")
        return value

    def as_payload(self) -> list[dict[str, str]]:
        """Return the messages in the shape expected by the upstream API."""

        return [message.model_dump() for message in self.messages]


def _describe(error: dict[str, Any]) -> str:
    kind = error.get("type", "")
    location = tuple(error.get("loc", ()))
    if kind in _CUSTOM_ERRORS:
        return str(error["msg"])
    if not location and kind in {"model_type", "model_attributes_type", "dict_type"}:
        return "Request body must be a JSON object"
    path = ".".join(str(part) for part in location)
    return f"{path}: {error['msg']}" if path else str(error["msg"])


def validate_chat_request(
    raw: Any,
    *,
    max_messages: int = MAX_MESSAGES,
    max_message_length: int = MAX_MESSAGE_LENGTH,
) -> ChatRequest:
    """Validate a decoded request body and return a :class:`ChatRequest`.

    Only the first violated constraint is reported.
    """

    try:
        return ChatRequest.model_validate(
            raw,
            context={"max_messages": max_messages, "max_message_length": max_message_length},
        )
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise InputValidationError(_describe(first), field=field) from exc


class HealthResponse(BaseModel):
    status: str = Field(..., description="Current API state")
    model: str = Field(..., description="Model used for chat completions")
    credentials_verified: bool = Field(..., description="Whether the API key passed the live probe")
