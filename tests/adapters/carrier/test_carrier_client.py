from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx
import pytest

from shipsync.adapters.carrier import CarrierFetcher
from shipsync.adapters.http_resilience import ResilientClient
from shipsync.config.carrier import CarrierConfig
from shipsync.config.http_resilience import ResilienceConfig
from shipsync.domain.ports.fetching import (
    CarrierRejectedError,
    CarrierTimeoutError,
    CarrierUnavailableError,
    MalformedResponseError,
)
from tests.helpers.orders import order_payload, success_envelope

if TYPE_CHECKING:
    from collections.abc import Callable

NOW = datetime(2025, 3, 1, 12, tzinfo=UTC)


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory


def _fetcher(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    max_pages: int = 1,
) -> CarrierFetcher:
    config = CarrierConfig(
        auth_header="Basic dGVzdDpzZWNyZXQ=",
        base_url="https://carrier.test/api",
        max_pages=max_pages,
        resilience=ResilienceConfig(name="carrier", timeout_seconds=12.0),
    )
    return CarrierFetcher(
        config=config,
        client_factory=_make_client_factory(handler),
        clock=lambda: NOW,
    )


def test_fetches_open_orders_with_auth_and_status() -> None:
    requests: list[httpx.Request] = []
    body = success_envelope(order_payload(1001))

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text=body)

    result = _fetcher(handler)()

    (request,) = requests
    assert request.url.path == "/api/getorders"
    assert request.url.params["status"] == "O"
    assert request.url.params["page"] == "1"
    assert request.headers["Authorization"] == "Basic dGVzdDpzZWNyZXQ="
    assert [order.order_id for order in result.orders] == ["1001"]
    assert result.raw_pages == [body]
    assert result.fetched_at == NOW
    assert result.line_item_count == 2


def test_follows_pages_until_empty() -> None:
    pages = {
        "1": json.dumps([order_payload(1)]),
        "2": json.dumps({"orders": [order_payload(2)]}),
        "3": json.dumps({"success": 1, "message": []}),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=pages[request.url.params["page"]])

    result = _fetcher(handler, max_pages=5)()

    assert [order.order_id for order in result.orders] == ["1", "2"]
    assert len(result.raw_pages) == 3


def test_single_page_by_default() -> None:
    seen_pages: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_pages.append(request.url.params["page"])
        return httpx.Response(200, text=json.dumps([order_payload(1)]))

    _fetcher(handler)()

    assert seen_pages == ["1"]


def test_non_2xx_is_rejected_with_body() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"success": 0, "message": "Invalid credentials"})

    with pytest.raises(CarrierRejectedError) as excinfo:
        _fetcher(handler)()

    assert excinfo.value.status_code == 401
    assert excinfo.value.body == {"success": 0, "message": "Invalid credentials"}


def test_timeout_is_classified() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(CarrierTimeoutError):
        _fetcher(handler)()


def test_connection_failure_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CarrierUnavailableError):
        _fetcher(handler)()


def test_unknown_envelope_is_malformed() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "ok"})

    with pytest.raises(MalformedResponseError):
        _fetcher(handler)()


def test_invalid_json_is_malformed() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>down for maintenance</html>")

    with pytest.raises(MalformedResponseError):
        _fetcher(handler)()


def test_invalid_order_entry_does_not_block_the_page() -> None:
    body = json.dumps({"orders": [{"order_total": "10"}, order_payload(1002)]})

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=body)

    result = _fetcher(handler)()

    assert [order.order_id for order in result.orders] == ["1002"]
    assert result.raw_pages == [body]
