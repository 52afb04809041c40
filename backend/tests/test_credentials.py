"""Tests for the credential gate and its single-flight probe."""

from __future__ import annotations

import asyncio

import pytest

from chat_relay.core.errors import AuthenticationError, ConfigurationError, UpstreamUnavailableError
from chat_relay.services.credentials import CredentialGate

from conftest import VALID_KEY, FakeUpstream, api_status_error


def _gate(upstream: FakeUpstream, key: str | None = VALID_KEY) -> CredentialGate:
    return CredentialGate(key, upstream, prefix="sk-", min_length=20)


@pytest.mark.parametrize("key", [None, "", "   "])
def test_missing_key_is_configuration_error(upstream: FakeUpstream, key) -> None:
    gate = _gate(upstream, key)

    with pytest.raises(ConfigurationError) as excinfo:
        asyncio.run(gate.ensure_ready())

    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "Service configuration error. Please try again later."
    assert upstream.probe_calls == 0


@pytest.mark.parametrize(
    "key",
    [
        "pk-0123456789abcdefghijkl",
        "sk-short",
        "sk-your_api_key_goes_here_123",
        "sk-${OPENAI_API_KEY}-0123456789",
        "sk-<replace-with-real-key>-000",
        "sk-0123456789 abcdefghijkl",
    ],
)
def test_malformed_key_is_authentication_error(upstream: FakeUpstream, key) -> None:
    gate = _gate(upstream, key)

    with pytest.raises(AuthenticationError):
        gate.check_format()

    assert upstream.probe_calls == 0


def test_probe_runs_once_and_is_cached(upstream: FakeUpstream) -> None:
    gate = _gate(upstream)

    async def scenario() -> None:
        await gate.ensure_ready()
        await gate.ensure_ready()

    asyncio.run(scenario())

    assert upstream.probe_calls == 1
    assert gate.verified is True


def test_concurrent_callers_share_one_probe(upstream: FakeUpstream) -> None:
    gate = _gate(upstream)

    async def scenario() -> list:
        upstream.probe_gate = asyncio.Event()
        callers = [asyncio.ensure_future(gate.ensure_ready()) for _ in range(10)]
        await asyncio.sleep(0)
        assert gate.probing is True
        upstream.probe_gate.set()
        return await asyncio.gather(*callers, return_exceptions=True)

    results = asyncio.run(scenario())

    assert upstream.probe_calls == 1
    assert results == [None] * 10
    assert gate.probing is False


def test_concurrent_callers_share_probe_failure(upstream: FakeUpstream) -> None:
    gate = _gate(upstream)
    upstream.probe_error = api_status_error(401, "Incorrect API key provided")

    async def scenario() -> list:
        upstream.probe_gate = asyncio.Event()
        callers = [asyncio.ensure_future(gate.ensure_ready()) for _ in range(5)]
        await asyncio.sleep(0)
        upstream.probe_gate.set()
        return await asyncio.gather(*callers, return_exceptions=True)

    results = asyncio.run(scenario())

    assert upstream.probe_calls == 1
    assert all(isinstance(result, AuthenticationError) for result in results)
    assert len({id(result) for result in results}) == 1


def test_failed_probe_resets_and_next_call_retries(upstream: FakeUpstream) -> None:
    gate = _gate(upstream)
    upstream.probe_error = api_status_error(401, "unauthorized")

    with pytest.raises(AuthenticationError):
        asyncio.run(gate.ensure_ready())
    assert gate.verified is False
    assert upstream.probe_calls == 1

    upstream.probe_error = None
    asyncio.run(gate.ensure_ready())

    assert upstream.probe_calls == 2
    assert gate.verified is True


def test_probe_failure_is_classified(upstream: FakeUpstream) -> None:
    gate = _gate(upstream)
    upstream.probe_error = ConnectionError("connection refused")

    with pytest.raises(UpstreamUnavailableError) as excinfo:
        asyncio.run(gate.ensure_ready())

    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_invalidate_forces_a_new_probe(upstream: FakeUpstream) -> None:
    gate = _gate(upstream)

    asyncio.run(gate.ensure_ready())
    gate.invalidate()
    asyncio.run(gate.ensure_ready())

    assert upstream.probe_calls == 2


def test_cancelled_waiter_does_not_cancel_probe(upstream: FakeUpstream) -> None:
    gate = _gate(upstream)

    async def scenario() -> None:
        upstream.probe_gate = asyncio.Event()
        first = asyncio.ensure_future(gate.ensure_ready())
        second = asyncio.ensure_future(gate.ensure_ready())
        await asyncio.sleep(0)
        first.cancel()
        await asyncio.sleep(0)
        upstream.probe_gate.set()
        await second

    asyncio.run(scenario())

    assert upstream.probe_calls == 1
    assert gate.verified is True
