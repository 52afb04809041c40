"""Shared fixtures and protocol-conforming fakes."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Dict, List, Optional

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from chat_relay.core.config import Settings
from chat_relay.main import create_app

VALID_KEY = "sk-test-0123456789abcdefghij"


def api_status_error(status: int, message: str, body: Optional[dict] = None) -> openai.APIStatusError:
    """Build the error the SDK raises for an upstream HTTP error status."""

    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return openai.APIStatusError(message, response=response, body=body)


class FakeUpstream:
    """Fake upstream client: counts probes and replays canned chunks."""

    def __init__(self, chunks: Optional[List[str]] = None) -> None:
        self.chunks = chunks if chunks is not None else ["Hel", "lo"]
        self.probe_calls = 0
        self.chat_calls: List[tuple[str, List[Dict[str, str]]]] = []
        self.probe_error: Optional[Exception] = None
        self.chat_error: Optional[Exception] = None
        self.probe_gate: Optional[asyncio.Event] = None

    async def probe(self) -> None:
        self.probe_calls += 1
        if self.probe_gate is not None:
            await self.probe_gate.wait()
        if self.probe_error is not None:
            raise self.probe_error

    async def stream_chat(self, model: str, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        self.chat_calls.append((model, messages))
        if self.chat_error is not None:
            raise self.chat_error
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[str]:
        for chunk in self.chunks:
            yield chunk


def make_settings(**overrides) -> Settings:
    values = {"openai_api_key": VALID_KEY, "environment": "production"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def api_client(settings: Settings, upstream: FakeUpstream) -> TestClient:
    app = create_app(settings, client=upstream)
    with TestClient(app) as client:
        yield client
