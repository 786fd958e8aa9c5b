from __future__ import annotations

import asyncio

import httpx

from campaignsync.adapters.http_resilience import (
    BlockingSession,
    RateLimit,
    ResilienceConfig,
    ResilientClient,
)


def test_client_applies_base_url_and_default_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    config = ResilienceConfig(
        name="test",
        base_url="https://api.example.test",
        default_headers={"User-Agent": "campaignsync-tests"},
    )

    async def call() -> httpx.Response:
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            return await client.post("/v2/token", json={"grant_type": "client_credentials"})

    response = asyncio.run(call())

    assert response.json() == {"ok": True}
    assert str(seen[0].url) == "https://api.example.test/v2/token"
    assert seen[0].headers["User-Agent"] == "campaignsync-tests"


def test_failed_requests_are_not_retried() -> None:
    attempts = 0

    def handler(_request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        return httpx.Response(503, text="unavailable")

    config = ResilienceConfig(name="test", ratelimit=RateLimit(max_calls=5, per_seconds=1.0))

    async def call() -> httpx.Response:
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            return await client.request("POST", "https://soap.example.test/Service.asmx")

    response = asyncio.run(call())

    assert response.status_code == 503
    assert attempts == 1


def test_blocking_session_keeps_one_client_until_closed() -> None:
    built: list[ResilientClient] = []

    def factory(config: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(
            config,
            transport=httpx.MockTransport(lambda _request: httpx.Response(204)),
        )
        built.append(client)
        return client

    async def status(client: ResilientClient) -> int:
        response = await client.post("https://api.example.test/ping")
        return response.status_code

    session = BlockingSession(ResilienceConfig(name="test"), client_factory=factory)
    assert [session.run(status), session.run(status)] == [204, 204]

    session.close()

    assert len(built) == 1
    assert built[0].is_closed
