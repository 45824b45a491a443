"""Application service for the recurring open-order sync cycle."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from shipsync.domain.enrichment import EnhancementPipeline, EnhancementResult
from shipsync.domain.model import ClaimStatus
from shipsync.domain.reconciliation import ReconciliationMerger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from shipsync.domain.model import OrderLineRecord
    from shipsync.domain.ports.fetching import OpenOrderFetcher
    from shipsync.domain.ports.unit_of_work import OrderSyncUnitOfWork
    from shipsync.domain.reconciliation import MergeResult

log = getLogger(__name__)


@dataclass(slots=True)
class SyncOrdersResult:
    """Outcome of one sync cycle."""

    fetched_orders: int
    line_items: int
    added: int
    removed: int
    refreshed: int
    written: bool
    enhancement: EnhancementResult | None = None

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


def sync_open_orders(
    *,
    fetcher: OpenOrderFetcher,
    unit_of_work_factory: Callable[[], OrderSyncUnitOfWork],
    merger: ReconciliationMerger | None = None,
    enhancement: EnhancementPipeline | None = None,
) -> SyncOrdersResult:
    """Fetch open orders, reconcile them with the store and persist the result.

    Carrier errors propagate before anything is written. Enhancement runs in its
    own unit of work after the commit and never fails the cycle; pass
    ``enhancement=None`` to skip it.
    """

    fetch = fetcher()
    fetched_at = fetch.fetched_at or datetime.now(UTC)
    merger = merger or ReconciliationMerger()

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        repositories.raw_payloads.replace(fetch.raw_pages, fetched_at=fetched_at)

        existing = repositories.order_lines.list_all()
        merge = merger.merge(
            existing,
            fetch.orders,
            id_floor=repositories.order_lines.surrogate_high_water(),
        )
        _log_dropped_rows(existing, merge)

        if merge.needs_write:
            repositories.order_lines.replace_all(merge.rows)
        uow.commit()

    log.info(
        "Synced %s open orders (%s line items): %s added, %s removed, %s refreshed",
        len(fetch.orders),
        len(merge.rows),
        len(merge.added),
        len(merge.removed),
        merge.refreshed,
    )

    enhancement_result: EnhancementResult | None = None
    if enhancement is not None:
        enhancement_result = enhance_order_lines(
            unit_of_work_factory=unit_of_work_factory,
            pipeline=enhancement,
        )

    return SyncOrdersResult(
        fetched_orders=len(fetch.orders),
        line_items=len(merge.rows),
        added=len(merge.added),
        removed=len(merge.removed),
        refreshed=merge.refreshed,
        written=merge.needs_write,
        enhancement=enhancement_result,
    )


def enhance_order_lines(
    *,
    unit_of_work_factory: Callable[[], OrderSyncUnitOfWork],
    pipeline: EnhancementPipeline | None = None,
) -> EnhancementResult:
    """Backfill customer names and product images on stored order lines.

    Any failure is logged and reported through ``EnhancementResult.failed``;
    the order lines already committed are left as they were.
    """

    pipeline = pipeline or EnhancementPipeline()
    try:
        with unit_of_work_factory() as uow:
            repositories = uow.repositories
            records = repositories.order_lines.list_missing_enrichment()
            if not records:
                return EnhancementResult()
            result = pipeline.run(
                records,
                repositories.raw_payloads.latest(),
                repositories.catalog.image_map(),
            )
            for record in result.updated:
                repositories.order_lines.update_enrichment(record)
            uow.commit()
            return result
    except Exception:
        log.exception("Order line enhancement failed")
        return EnhancementResult(failed=True)


def _log_dropped_rows(existing: Iterable[OrderLineRecord], merge: MergeResult) -> None:
    if not merge.removed:
        return
    removed = set(merge.removed)
    for row in existing:
        if row.key not in removed:
            continue
        if row.status is ClaimStatus.UNCLAIMED:
            log.debug("Dropping order line %s/%s", row.order_id, row.product_code)
        else:
            log.warning(
                "Dropping %s order line %s/%s (claimed by %s); no longer open upstream",
                row.status.value,
                row.order_id,
                row.product_code,
                row.claimed_by,
            )
