from __future__ import annotations

import asyncio
from collections.abc import Callable  # noqa: TC003

import httpx
import pytest
from hishel.httpx import AsyncCacheClient

from ryftclaim.adapters.http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    ResilientClient,
    RetryPolicy,
)
from ryftclaim.config import ConfigurationError


def test_client_without_cache_uses_plain_httpx_client() -> None:
    client = ResilientClient(ResilienceConfig(name="plain", base_url="https://api.test"))

    assert not isinstance(client._client, AsyncCacheClient)  # noqa: SLF001
    assert client._client.base_url.host == "api.test"  # noqa: SLF001
    assert client._client.headers["User-Agent"].startswith("ryftclaim")  # noqa: SLF001
    asyncio.run(client.aclose())


def test_client_with_memory_cache_uses_cache_client() -> None:
    client = ResilientClient(
        ResilienceConfig(name="cached", cache=CacheConfig(default_ttl_seconds=5))
    )

    assert isinstance(client._client, AsyncCacheClient)  # noqa: SLF001
    asyncio.run(client.aclose())


def test_cache_serves_repeated_gets_but_not_posts() -> None:
    calls: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        return httpx.Response(200, json={"n": len(calls)})

    async def run() -> list[object]:
        client = ResilientClient(
            ResilienceConfig(name="cached", cache=CacheConfig.memory(ttl_seconds=60)),
            transport=httpx.MockTransport(handler),
        )
        async with client:
            first = await client.get("https://api.test/avatar")
            second = await client.get("https://api.test/avatar")
            await client.post("https://api.test/users", json={"q": 1})
            await client.post("https://api.test/users", json={"q": 1})
        return [first.json(), second.json()]

    assert asyncio.run(run()) == [{"n": 1}, {"n": 1}]
    assert calls == ["GET", "POST", "POST"]


def test_requests_pass_through_rate_limiter() -> None:
    calls: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, json={"ok": True})

    async def run() -> list[int]:
        client = ResilientClient(
            ResilienceConfig(name="limited", ratelimit=RateLimit(max_calls=5, per_seconds=1.0)),
            transport=httpx.MockTransport(handler),
        )
        async with client:
            responses = [await client.get(f"https://api.test/{n}") for n in range(3)]
        return [response.status_code for response in responses]

    assert asyncio.run(run()) == [200, 200, 200]
    assert calls == ["/0", "/1", "/2"]


def test_default_headers_extend_user_agent() -> None:
    config = ResilienceConfig(name="headers", default_headers={"Accept": "application/json"})

    assert config.headers["Accept"] == "application/json"
    assert "User-Agent" in config.headers


@pytest.mark.parametrize(
    "build",
    [
        lambda: RateLimit(max_calls=0, per_seconds=1.0),
        lambda: RateLimit(max_calls=1, per_seconds=0),
        lambda: ResilienceConfig(name="zero", timeout_seconds=0),
    ],
)
def test_invalid_transport_settings_are_rejected(build: Callable[[], object]) -> None:
    with pytest.raises(ConfigurationError):
        build()


def test_retry_presets() -> None:
    assert RetryPolicy.disabled().total == 0
    assert "POST" in RetryPolicy.including_post().allowed_methods
    assert "POST" not in RetryPolicy().allowed_methods
    assert CacheConfig.memory(ttl_seconds=60).refresh_ttl_on_access is False
