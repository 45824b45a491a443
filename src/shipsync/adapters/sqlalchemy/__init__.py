"""SQLAlchemy adapter package for shipsync."""

from __future__ import annotations

from .mappings import (
    metadata,
    order_line_table,
    product_catalog_table,
    raw_payload_table,
    sync_state_table,
)
from .repositories import (
    SqlAlchemyOrderLineRepository,
    SqlAlchemyProductCatalogRepository,
    SqlAlchemyRawPayloadRepository,
)
from .unit_of_work import SqlAlchemyOrderSyncUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyOrderLineRepository",
    "SqlAlchemyOrderSyncUnitOfWork",
    "SqlAlchemyProductCatalogRepository",
    "SqlAlchemyRawPayloadRepository",
    "StartupError",
    "metadata",
    "order_line_table",
    "product_catalog_table",
    "raw_payload_table",
    "shutdown",
    "startup",
    "sync_state_table",
]
