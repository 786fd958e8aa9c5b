from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter

from campaignsync.config.http_resilience import RateLimit, ResilienceConfig

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping
    from types import TracebackType

    from httpx._types import TimeoutTypes, URLTypes

log = getLogger(__name__)

__all__ = ["BlockingSession", "RateLimit", "ResilienceConfig", "ResilientClient"]


class RequestOptions(TypedDict, total=False):
    """Request arguments the integrations pass through to httpx."""

    content: bytes | str
    json: object
    headers: Mapping[str, str]
    timeout: TimeoutTypes


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: Mapping[str, str]
    transport: httpx.AsyncBaseTransport


class ResilientClient:
    """Async HTTP client with an optional client-side rate limit.

    Requests are sent once; there is no retry transport and no response cache.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        client_kwargs: AsyncClientOptions = {"timeout": config.timeout_seconds}
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if config.default_headers:
            client_kwargs["headers"] = dict(config.default_headers)
        if transport is not None:
            client_kwargs["transport"] = transport

        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        log.debug("%s %s %s", self.config.name, method, url)
        return await self._send(lambda: self._client.request(method, url, **kwargs))

    async def post(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def _send(self, func: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        if self._limiter is None:
            return await func()
        async with self._limiter:
            return await func()


class BlockingSession:
    """Runs an integration's calls from synchronous code on one private event loop.

    The loop and the :class:`ResilientClient` built on it live as long as the
    session, so the client's rate limit spans every call made through it.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self.config = config
        self._client_factory = client_factory or ResilientClient
        self._runner = asyncio.Runner()
        self._client: ResilientClient | None = None

    def __enter__(self) -> BlockingSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def run[T](self, call: Callable[[ResilientClient], Awaitable[T]]) -> T:
        return self._runner.run(self._call(call))

    def close(self) -> None:
        if self._client is not None:
            self._runner.run(self._client.aclose())
            self._client = None
        self._runner.close()

    async def _call[T](self, call: Callable[[ResilientClient], Awaitable[T]]) -> T:
        if self._client is None:
            self._client = self._client_factory(self.config)
        return await call(self._client)
