"""HTTP client for the carrier's open-orders endpoint."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from shipsync.adapters.http_resilience import ResilientClient
from shipsync.config.carrier import CarrierConfig, get_carrier_config
from shipsync.domain.ports.fetching import (
    CarrierRejectedError,
    CarrierTimeoutError,
    CarrierUnavailableError,
    OpenOrderFetcher,
    OpenOrdersFetch,
)

from .translator import decode_page, parse_open_orders

if TYPE_CHECKING:
    from collections.abc import Callable

    from shipsync.config.http_resilience import ResilienceConfig
    from shipsync.domain.model import UpstreamOrder

log = getLogger(__name__)

_BODY_PREVIEW_CHARS = 500


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _response_body(response: httpx.Response) -> object:
    try:
        return response.json()
    except ValueError:
        return response.text[:_BODY_PREVIEW_CHARS]


@dataclass(slots=True)
class CarrierFetcher:
    """Fetch every open order, one GET per page, stopping at an empty page."""

    config: CarrierConfig = field(default_factory=get_carrier_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    clock: Callable[[], datetime] = field(default=_utcnow)

    def __call__(self) -> OpenOrdersFetch:
        return asyncio.run(self._fetch_open_orders_async())

    async def _fetch_open_orders_async(self) -> OpenOrdersFetch:
        orders: list[UpstreamOrder] = []
        raw_pages: list[str] = []

        async with self.client_factory(self.config.resilience) as client:
            for page in range(1, self.config.max_pages + 1):
                body = await self._request_page(client=client, page=page)
                raw_pages.append(body)
                raw_orders = decode_page(body)
                log.debug("Carrier page %s returned %s orders", page, len(raw_orders))
                if not raw_orders:
                    break
                orders.extend(parse_open_orders(raw_orders))

        log.info("Fetched %s open orders from %s page(s)", len(orders), len(raw_pages))
        return OpenOrdersFetch(orders=orders, raw_pages=raw_pages, fetched_at=self.clock())

    async def _request_page(self, *, client: ResilientClient, page: int) -> str:
        params = httpx.QueryParams({"status": self.config.open_status, "page": page})
        try:
            response = await client.get(
                self.config.orders_url,
                params=params,
                headers={"Authorization": self.config.auth_header},
            )
        except httpx.TimeoutException as exc:
            raise CarrierTimeoutError(
                f"Carrier did not respond within {self.config.resilience.timeout_seconds}s"
            ) from exc
        except httpx.TransportError as exc:
            raise CarrierUnavailableError(f"Carrier unreachable: {exc}") from exc

        if not response.is_success:
            body = _response_body(response)
            log.error("Carrier rejected open-orders request (%s): %s", response.status_code, body)
            raise CarrierRejectedError(
                f"Carrier responded with HTTP {response.status_code}",
                status_code=response.status_code,
                body=body,
            )
        return response.text


if TYPE_CHECKING:
    _fetcher_check: OpenOrderFetcher = CarrierFetcher()
