"""Translate loosely-shaped upstream failures into typed service errors."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any, NoReturn, Optional

from chat_relay.core.errors import (
    AuthenticationError,
    BadUpstreamRequestError,
    QuotaExceededError,
    RateLimitError,
    ServiceError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

_CODE_FIELDS = ("status_code", "statusCode", "status", "code")
_BODY_FIELDS = ("body", "response_body", "responseBody")
_PAYLOAD_FIELDS = ("code", "type", "message", "param")

RATE_LIMIT_PATTERN = re.compile(r"rate[\s_-]*limit|too many requests", re.IGNORECASE)
QUOTA_PATTERN = re.compile(
    r"quota|billing|insufficient[\s_-]*(funds|balance|credit)|payment required",
    re.IGNORECASE,
)
AUTHENTICATION_PATTERN = re.compile(
    r"invalid[\s_-]*(api[\s_-]*)?key|incorrect[\s_-]*api[\s_-]*key|authenticat|unauthori[sz]ed",
    re.IGNORECASE,
)
# not "invalid_request": OpenAI tags most 4xx payloads with type invalid_request_error
BAD_REQUEST_PATTERN = re.compile(r"bad[\s_-]*request", re.IGNORECASE)

# (status code, message pattern, error class); first match wins
_RULES = (
    (429, RATE_LIMIT_PATTERN, RateLimitError),
    (402, QUOTA_PATTERN, QuotaExceededError),
    (401, AUTHENTICATION_PATTERN, AuthenticationError),
    (400, BAD_REQUEST_PATTERN, BadUpstreamRequestError),
)


def _field(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def coerce_status(value: Any) -> Optional[int]:
    """Return ``value`` as an HTTP status number, or ``None``."""

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def extract_status(error: Any) -> Optional[int]:
    """Read the first numeric status from the aliased code fields of ``error``."""

    for name in _CODE_FIELDS:
        status = coerce_status(_field(error, name))
        if status is not None:
            return status
    response = _field(error, "response")
    if response is not None and not isinstance(response, (str, bytes)):
        return coerce_status(_field(response, "status_code"))
    return None


def _decode_payload(value: Any) -> Optional[Mapping]:
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return None
    if not isinstance(value, Mapping):
        return None
    nested = value.get("error")
    if isinstance(nested, Mapping):
        return nested
    if isinstance(nested, str) and nested:
        return {"message": nested}
    return value


def extract_payload(error: Any) -> Optional[Mapping]:
    """Return the structured upstream error payload attached to ``error``."""

    for name in _BODY_FIELDS:
        payload = _decode_payload(_field(error, name))
        if payload is not None:
            return payload
    data = _field(error, "data")
    if data is not None:
        return _decode_payload(_field(data, "error"))
    return None


def extract_text(error: Any) -> str:
    """Collect the message and payload fields searched by the patterns."""

    parts = []
    message = _field(error, "message")
    if message:
        parts.append(str(message))
    elif not isinstance(error, Mapping):
        parts.append(str(error))
    payload = extract_payload(error)
    if payload:
        parts.extend(str(payload[key]) for key in _PAYLOAD_FIELDS if payload.get(key))
    return " ".join(parts)


def to_service_error(error: Any) -> ServiceError:
    """Map any upstream failure onto one :class:`ServiceError` subclass."""

    if isinstance(error, ServiceError):
        return error
    status = extract_status(error)
    text = extract_text(error)
    for code, pattern, error_class in _RULES:
        if status == code or pattern.search(text):
            kind = error_class
            break
    else:
        kind = UpstreamUnavailableError
    logger.warning("Upstream failure classified as %s (status=%s): %s", kind.__name__, status, text)
    return kind()


def classify(error: Any) -> NoReturn:
    """Raise the typed service error corresponding to ``error``."""

    service_error = to_service_error(error)
    if service_error is error:
        raise service_error
    if isinstance(error, BaseException):
        raise service_error from error
    raise service_error
