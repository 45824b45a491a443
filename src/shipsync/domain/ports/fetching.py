"""Ports for fetching open orders from the carrier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from shipsync.domain.model import UpstreamOrder


class CarrierError(RuntimeError):
    """Base class for failures that abort a sync cycle before any merge."""


class CarrierUnavailableError(CarrierError):
    """The carrier could not be reached (refused connection, DNS, network)."""


class CarrierTimeoutError(CarrierError):
    """The carrier did not answer within the configured timeout."""


class CarrierRejectedError(CarrierError):
    """The carrier answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int, body: object = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(CarrierError):
    """The carrier answered 2xx with a payload shape we do not recognise."""


@dataclass(slots=True)
class OpenOrdersFetch:
    """Open orders from one fetch, with the verbatim response bodies."""

    orders: list[UpstreamOrder]
    raw_pages: list[str] = field(default_factory=list[str])
    fetched_at: datetime | None = None

    @property
    def line_item_count(self) -> int:
        return sum(len(order.line_items) for order in self.orders)


@runtime_checkable
class OpenOrderFetcher(Protocol):
    """Callable port returning every currently open order."""

    def __call__(self) -> OpenOrdersFetch: ...


__all__ = [
    "CarrierError",
    "CarrierRejectedError",
    "CarrierTimeoutError",
    "CarrierUnavailableError",
    "MalformedResponseError",
    "OpenOrderFetcher",
    "OpenOrdersFetch",
]
