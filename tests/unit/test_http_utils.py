"""Unit tests for HTTP utilities.

This module tests client construction, the retry decorator, and the
session-carrying HTTP client.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from splunk_sdk.utils.http import async_retry, create_client, create_limits, create_timeout
from splunk_sdk.utils.http_client import SessionClient


def test_create_client_uses_defaults():
    client = create_client()
    assert isinstance(client, httpx.AsyncClient)
    assert client.timeout.read == 30.0
    asyncio.run(client.aclose())


def test_create_client_returns_new_client_each_call():
    c1 = create_client()
    c2 = create_client()
    assert c1 is not c2
    asyncio.run(c1.aclose())
    asyncio.run(c2.aclose())


def test_create_client_honours_client_class():
    client = create_client(client_class=SessionClient)
    assert isinstance(client, SessionClient)
    assert client.session_key is None
    asyncio.run(client.aclose())


def test_async_retry_succeeds_after_failures():
    calls = {"n": 0}

    @async_retry(max_attempts=3, delay=0.01)
    async def sometimes():
        calls["n"] += 1
        if calls["n"] < 2:
            raise httpx.HTTPError("boom")
        return 42

    out = asyncio.run(sometimes())
    assert out == 42
    assert calls["n"] == 2


def test_async_retry_max_attempts():
    """Test that retry stops after max attempts."""
    calls = {"n": 0}

    @async_retry(max_attempts=3, delay=0.01, exceptions=(Exception,))
    async def always_fails():
        calls["n"] += 1
        raise ValueError("Always fails")

    with pytest.raises(ValueError, match="Always fails"):
        asyncio.run(always_fails())
    assert calls["n"] == 3


def test_async_retry_predicate_rejects_immediately():
    calls = {"n": 0}

    @async_retry(
        max_attempts=3,
        delay=0.01,
        exceptions=(ValueError,),
        retry_if=lambda e: str(e) == "transient",
    )
    async def fails_hard():
        calls["n"] += 1
        raise ValueError("fatal")

    with pytest.raises(ValueError, match="fatal"):
        asyncio.run(fails_hard())
    assert calls["n"] == 1


def test_async_retry_fixed_delay():
    sleep = AsyncMock()

    @async_retry(max_attempts=3, delay=0.5, exceptions=(ValueError,))
    async def always_fails():
        raise ValueError("again")

    with patch("splunk_sdk.utils.http.retry.asyncio.sleep", sleep):
        with pytest.raises(ValueError):
            asyncio.run(always_fails())

    # No sleep after the final attempt
    assert [c.args[0] for c in sleep.await_args_list] == [0.5, 0.5]


def test_create_timeout_defaults():
    """Test timeout creation with default values."""
    timeout = create_timeout()
    assert timeout.connect == 5.0
    assert timeout.read == 30.0
    assert timeout.write == 10.0
    assert timeout.pool == 5.0


def test_create_limits_defaults():
    """Test limits creation with default values."""
    limits = create_limits()
    assert limits.max_keepalive_connections == 10
    assert limits.max_connections == 20
    assert limits.keepalive_expiry == 30.0


@pytest.mark.asyncio
class TestSessionClient:
    """Test suite for SessionClient header injection."""

    async def test_injects_session_key(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["authorization"] = request.headers.get("authorization")
            return httpx.Response(200)

        async with SessionClient(transport=httpx.MockTransport(handler)) as client:
            client.session_key = "abc123"
            await client.get("https://localhost:8089/services/server/info")

        assert seen["authorization"] == "Splunk abc123"

    async def test_no_header_without_session_key(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["authorization"] = request.headers.get("authorization")
            return httpx.Response(200)

        async with SessionClient(transport=httpx.MockTransport(handler)) as client:
            await client.get(
                "https://localhost:8089/services/server/info",
                headers={"Authorization": "Bearer stray"},
            )

        assert seen["authorization"] is None
