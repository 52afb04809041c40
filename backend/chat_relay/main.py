from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_relay.api.routes import chat, health
from chat_relay.core.config import Settings, get_settings
from chat_relay.core.logging_setup import configure_logging
from chat_relay.services.credentials import CredentialGate
from chat_relay.services.openai_client import OpenAIClient

logger = logging.getLogger(__name__)


def build_openai_client(settings: Settings) -> OpenAIClient:
    return OpenAIClient(
        api_key=settings.api_key_value(),
        base_url=settings.openai_base_url,
        timeout=settings.request_timeout,
    )


def create_app(settings: Optional[Settings] = None, *, client: Optional[OpenAIClient] = None) -> FastAPI:
    """Build the application with its process-wide client and credential gate."""

    settings = settings or get_settings()
    configure_logging(settings)
    client = client or build_openai_client(settings)

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.openai_client = client
    app.state.credential_gate = CredentialGate(
        settings.api_key_value(),
        client,
        prefix=settings.api_key_prefix,
        min_length=settings.api_key_min_length,
    )
    app.include_router(health.router, prefix="/api")
    app.include_router(chat.router, prefix="/api")

    if settings.api_key_value() is None:
        logger.warning("No upstream API key configured; chat requests will fail until one is set")
    logger.info("%s started in %s mode, model %s", settings.app_name, settings.environment, settings.chat_model)
    return app


app = create_app()

__all__ = ["app", "create_app"]
