"""Service layer for the application."""

from chat_relay.services.chat import ChatService
from chat_relay.services.credentials import CredentialGate
from chat_relay.services.error_classifier import classify, to_service_error
from chat_relay.services.openai_client import ChatStream, OpenAIClient

__all__ = [
    "ChatService",
    "ChatStream",
    "CredentialGate",
    "OpenAIClient",
    "classify",
    "to_service_error",
]
