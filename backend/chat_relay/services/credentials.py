"""Pre-flight validation of the upstream API credential."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from chat_relay.core.errors import AuthenticationError, ConfigurationError
from chat_relay.services.error_classifier import classify

logger = logging.getLogger(__name__)

PLACEHOLDER_MARKERS = ("your_", "your-", "xxxx", "changeme", "placeholder", "replace", "<", ">", "${", "{{")


class Prober(Protocol):
    async def probe(self) -> None:
        ...


class CredentialGate:
    """Checks the API key once per process before chat requests go out.

    The live probe is single-flight: callers arriving while a probe is in
    flight await the same task. A successful probe is cached until
    :meth:`invalidate` is called.
    """

    def __init__(
        self,
        api_key: Optional[str],
        prober: Prober,
        *,
        prefix: str = "sk-",
        min_length: int = 20,
    ) -> None:
        self._api_key = api_key
        self._prober = prober
        self._prefix = prefix
        self._min_length = min_length
        self._tested = False
        self._pending: Optional[asyncio.Task] = None

    @property
    def verified(self) -> bool:
        return self._tested

    @property
    def probing(self) -> bool:
        return self._pending is not None

    def check_format(self) -> None:
        """Validate presence and shape of the key without any network call."""

        key = self._api_key
        if not key or not key.strip():
            logger.error("Upstream API key is not configured")
            raise ConfigurationError()
        lowered = key.lower()
        if (
            not key.startswith(self._prefix)
            or len(key) < self._min_length
            or any(marker in lowered for marker in PLACEHOLDER_MARKERS)
            or any(char.isspace() for char in key)
        ):
            logger.error("Upstream API key has an unexpected format")
            raise AuthenticationError()

    async def ensure_ready(self) -> None:
        self.check_format()
        if self._tested:
            return
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._run_probe())
        # shield so a cancelled waiter does not cancel the shared probe
        await asyncio.shield(self._pending)

    def invalidate(self) -> None:
        if self._tested:
            logger.warning("Upstream credential rejected; it will be probed again on the next request")
        self._tested = False

    async def _run_probe(self) -> None:
        logger.info("Probing upstream API key")
        try:
            await self._prober.probe()
        except Exception as exc:
            logger.error("Upstream API key probe failed: %s", exc)
            classify(exc)
        else:
            self._tested = True
            logger.info("Upstream API key verified")
        finally:
            self._pending = None
