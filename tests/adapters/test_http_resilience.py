from __future__ import annotations

import asyncio

import httpx

from playtally.adapters.http_resilience import (
    ResilientClient,
    _ShouldCacheResponseFilter,  # pyright: ignore[reportPrivateUsage]
    build_retry,
)
from playtally.config import RateLimit, ResilienceConfig, RetryPolicy
from tests.helpers.records import make_client_factory


def test_build_retry_uses_policy_values() -> None:
    retry = build_retry(RetryPolicy(total=2, backoff_factor=0.1))

    assert retry.total == 2
    assert retry.backoff_factor == 0.1


def test_rate_limited_client_passes_requests_through() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.method)
        return httpx.Response(200, json={"ok": True})

    config = ResilienceConfig(name="limited", ratelimit=RateLimit(max_calls=10, per_seconds=1.0))
    factory = make_client_factory(handler)

    async def exercise() -> list[int]:
        async with factory(config) as client:
            first = await client.get("https://api.test/items")
            second = await client.post("https://api.test/items", json={"a": 1})
        return [first.status_code, second.status_code]

    assert asyncio.run(exercise()) == [200, 200]
    assert seen == ["GET", "POST"]


def test_should_cache_filter_delegates_to_predicate() -> None:
    response_filter = _ShouldCacheResponseFilter(
        lambda payload: isinstance(payload, list) and bool(payload)
    )

    assert response_filter.needs_body()
    assert response_filter.apply(None, b"[1, 2]")  # type: ignore[arg-type]
    assert not response_filter.apply(None, b"[]")  # type: ignore[arg-type]
    assert response_filter.apply(None, b"not json")  # type: ignore[arg-type]


def test_client_without_cache_uses_plain_async_client() -> None:
    client = ResilientClient(ResilienceConfig(name="plain"))

    assert type(client._client) is httpx.AsyncClient  # noqa: SLF001  # type: ignore[reportPrivateUsage]
    asyncio.run(client.aclose())
