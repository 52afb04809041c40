"""Common dependency functions for API routes.

The client and credential gate are built once by :func:`chat_relay.main.create_app`
and live on ``app.state`` for the lifetime of the process.
"""

from fastapi import Depends, Request

from chat_relay.core.config import Settings
from chat_relay.services.chat import ChatService
from chat_relay.services.credentials import CredentialGate
from chat_relay.services.openai_client import OpenAIClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_openai_client(request: Request) -> OpenAIClient:
    return request.app.state.openai_client


def get_credential_gate(request: Request) -> CredentialGate:
    return request.app.state.credential_gate


def get_chat_service(
    settings: Settings = Depends(get_app_settings),
    client: OpenAIClient = Depends(get_openai_client),
    gate: CredentialGate = Depends(get_credential_gate),
) -> ChatService:
    return ChatService(
        client,
        gate,
        model=settings.chat_model,
        max_messages=settings.max_messages,
        max_message_length=settings.max_message_length,
    )
