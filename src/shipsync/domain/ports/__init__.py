"""Domain port definitions for adapters."""

from __future__ import annotations

from .enrichment import CustomerNameSource, ProductMatcher, ProductMatcherFactory
from .fetching import (
    CarrierError,
    CarrierRejectedError,
    CarrierTimeoutError,
    CarrierUnavailableError,
    MalformedResponseError,
    OpenOrderFetcher,
    OpenOrdersFetch,
)
from .persistence import (
    ConcurrentModificationError,
    OrderLineRepository,
    ProductCatalogRepository,
    RawPayloadRepository,
    RecordNotFoundError,
)
from .unit_of_work import (
    OrderSyncRepositories,
    OrderSyncUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CarrierError",
    "CarrierRejectedError",
    "CarrierTimeoutError",
    "CarrierUnavailableError",
    "ConcurrentModificationError",
    "CustomerNameSource",
    "MalformedResponseError",
    "OpenOrderFetcher",
    "OpenOrdersFetch",
    "OrderLineRepository",
    "OrderSyncRepositories",
    "OrderSyncUnitOfWork",
    "ProductCatalogRepository",
    "ProductMatcher",
    "ProductMatcherFactory",
    "RawPayloadRepository",
    "RecordNotFoundError",
    "RepositoryCollection",
    "UnitOfWork",
]
