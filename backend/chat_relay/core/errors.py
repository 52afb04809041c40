"""Typed errors raised by the chat service.

Every error carries a user-safe ``message`` and the HTTP ``status_code``
it is rendered with. Upstream details never end up in ``message``; they
stay on the chained ``__cause__`` and in the logs.
"""

from __future__ import annotations

from typing import Optional


class ChatRelayError(Exception):
    """Base class for errors that map onto an HTTP response."""

    default_message = "Internal server error. Please try again later."
    status_code = 500

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InputValidationError(ChatRelayError):
    """Raised when the chat payload violates the message schema."""

    default_message = "Invalid chat request."
    status_code = 400

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class MalformedRequestError(ChatRelayError):
    """Raised when the request body cannot be decoded as JSON."""

    default_message = "Invalid JSON in request body."
    status_code = 400


class ServiceError(ChatRelayError):
    """Failure of the environment or the upstream service."""

    default_message = "AI service temporarily unavailable. Please try again later."
    status_code = 503


class RateLimitError(ServiceError):
    default_message = "Rate limit exceeded. Please try again later."
    status_code = 429


class QuotaExceededError(ServiceError):
    default_message = "Service quota exceeded. Please try again later."
    status_code = 503


class AuthenticationError(ServiceError):
    default_message = "Service authentication error. Please try again later."
    status_code = 503


class ConfigurationError(ServiceError):
    default_message = "Service configuration error. Please try again later."
    status_code = 500


class BadUpstreamRequestError(ServiceError):
    default_message = "The AI service rejected the request. Please check your input and try again."
    status_code = 400


class UpstreamUnavailableError(ServiceError):
    pass


__all__ = [
    "AuthenticationError",
    "BadUpstreamRequestError",
    "ChatRelayError",
    "ConfigurationError",
    "InputValidationError",
    "MalformedRequestError",
    "QuotaExceededError",
    "RateLimitError",
    "ServiceError",
    "UpstreamUnavailableError",
]
