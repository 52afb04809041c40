"""Gateway: OpenAI-compatible chat client used by the chat service.

Works with any OpenAI-compatible API. SDK errors (``openai.APIStatusError``
and friends) propagate unchanged; the error classifier reads their
``status_code``, ``code`` and ``body``.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Dict, List, Optional

import httpx
import openai

logger = logging.getLogger(__name__)


class ChatStream:
    """Async iterator over the text deltas of a streamed completion.

    Owns the SDK stream and client; both are closed once the stream is
    exhausted or :meth:`aclose` is called.
    """

    def __init__(self, stream: openai.AsyncStream, client: openai.AsyncOpenAI) -> None:
        self._stream = stream
        self._client = client
        self._closed = False

    def __aiter__(self) -> AsyncIterator[str]:
        return self._iter_text()

    async def _iter_text(self) -> AsyncIterator[str]:
        try:
            async for chunk in self._stream:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        except (openai.APIError, httpx.HTTPError) as exc:
            # the status line is already sent, so the stream just ends
            logger.error("Upstream stream interrupted: %s", exc)
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._stream.close()
        finally:
            await self._client.close()


class OpenAIClient:
    """Wraps ``openai.AsyncOpenAI``; a fresh SDK client is built per call."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.openai.com/v1",
        *,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _build_client(self) -> openai.AsyncOpenAI:
        http_client = None
        if self._transport is not None:
            http_client = httpx.AsyncClient(transport=self._transport, timeout=self.timeout)
        # one upstream attempt per request; the SDK retries by default
        return openai.AsyncOpenAI(
            api_key=self._api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
            http_client=http_client,
        )

    async def probe(self) -> None:
        """List models; only succeeds when the key is accepted."""

        async with self._build_client() as client:
            await client.models.list()
        logger.debug("Key check against %s succeeded", self.base_url)

    async def stream_chat(self, model: str, messages: List[Dict[str, str]]) -> ChatStream:
        """Open a streamed completion and return it once the upstream accepted it."""

        client = self._build_client()
        try:
            stream = await client.chat.completions.create(
                model=model,
                messages=messages,  # dicts satisfy ChatCompletionMessageParam at runtime
                stream=True,
            )
        except BaseException:
            await client.close()
            raise
        return ChatStream(stream, client)
