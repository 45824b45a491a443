from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import Retry, RetryTransport

from shipsync.config.http_resilience import RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        AuthTypes,
        HeaderTypes,
        QueryParamTypes,
        RequestExtensions,
        TimeoutTypes,
        URLTypes,
    )

    from shipsync.config.http_resilience import ResponseHook


class RequestOptions(TypedDict, total=False):
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    auth: AuthTypes | UseClientDefault | None
    follow_redirects: bool | UseClientDefault
    timeout: TimeoutTypes | UseClientDefault
    extensions: RequestExtensions | None


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    event_hooks: dict[str, list[ResponseHook]]
    transport: httpx.AsyncBaseTransport


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


def build_limiter(ratelimit: RateLimit | None) -> AsyncLimiter | None:
    if ratelimit is None:
        return None
    return AsyncLimiter(ratelimit.max_calls, ratelimit.per_seconds)


class ResilientClient:
    """Async HTTP client with transport retries and client-side rate limiting."""

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter = build_limiter(config.ratelimit)

        headers = dict(config.default_headers) if config.default_headers else None
        event_hooks = {"response": list(config.response_hooks)} if config.response_hooks else None

        client_kwargs: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": RetryTransport(retry=build_retry(config.retry)),
        }
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if headers is not None:
            client_kwargs["headers"] = headers
        if event_hooks is not None:
            client_kwargs["event_hooks"] = event_hooks

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

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        async def do_request() -> httpx.Response:
            return await self._client.request(method, url, **kwargs)

        return await self._send(do_request)

    async def get(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def _send(self, func: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        if self._limiter is None:
            return await func()
        async with self._limiter:
            return await func()
