"""Ports for persisting order-line records and their side tables."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from shipsync.domain.model import OrderLineRecord


class ConcurrentModificationError(RuntimeError):
    """Raised when a row changed since it was read (version mismatch)."""

    def __init__(self, message: str, *, surrogate_id: int) -> None:
        super().__init__(message)
        self.surrogate_id = surrogate_id


class RecordNotFoundError(LookupError):
    """Raised when no order line exists for a surrogate id."""


@runtime_checkable
class OrderLineRepository(Protocol):
    """Persistence contract for the active order-line set."""

    def list_all(self) -> list[OrderLineRecord]: ...

    def get(self, surrogate_id: int) -> OrderLineRecord: ...

    def list_by_order(self, order_id: str) -> list[OrderLineRecord]: ...

    def list_missing_enrichment(self) -> list[OrderLineRecord]: ...

    def surrogate_high_water(self) -> int: ...

    def replace_all(self, rows: Sequence[OrderLineRecord]) -> None: ...

    def update_workflow(self, record: OrderLineRecord) -> None: ...

    def update_enrichment(self, record: OrderLineRecord) -> None: ...


@runtime_checkable
class RawPayloadRepository(Protocol):
    """Verbatim cache of the last upstream response bodies."""

    def replace(self, pages: Sequence[str], *, fetched_at: datetime) -> None: ...

    def latest(self) -> list[str]: ...

    def fetched_at(self) -> datetime | None: ...


@runtime_checkable
class ProductCatalogRepository(Protocol):
    """Product name to image lookup used for enrichment."""

    def add(self, name: str, image: str) -> None: ...

    def image_map(self) -> dict[str, str]: ...
