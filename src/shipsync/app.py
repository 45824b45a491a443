"""Application orchestration entry points."""

from __future__ import annotations

import csv
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from shipsync.adapters.carrier import CarrierFetcher, extract_customer_names
from shipsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyOrderSyncUnitOfWork,
    is_started,
    startup,
)
from shipsync.config import get_carrier_config, get_sync_config
from shipsync.domain.allocation import RatioSplitCalculator
from shipsync.domain.enrichment import EnhancementPipeline, FuzzyProductMatcher
from shipsync.domain.order_sync import enhance_order_lines, sync_open_orders
from shipsync.domain.payment import PaymentClassifier
from shipsync.domain.ports.unit_of_work import OrderSyncUnitOfWork
from shipsync.domain.reconciliation import ReconciliationMerger

if TYPE_CHECKING:
    from pathlib import Path

    from shipsync.config import SyncConfig
    from shipsync.domain.enrichment import EnhancementResult
    from shipsync.domain.model import OrderLineRecord
    from shipsync.domain.order_sync import SyncOrdersResult
    from shipsync.domain.ports.fetching import OpenOrderFetcher

UnitOfWorkFactory = Callable[[], OrderSyncUnitOfWork]

log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def build_merger(config: SyncConfig) -> ReconciliationMerger:
    return ReconciliationMerger(
        calculator=RatioSplitCalculator(distribute_remainder=config.distribute_remainder),
        classifier=PaymentClassifier(
            collect_tag=config.collect_tag,
            advance_rate=config.collect_advance_rate,
        ),
    )


def build_enhancement_pipeline() -> EnhancementPipeline:
    return EnhancementPipeline(
        customer_names=extract_customer_names,
        matcher_factory=FuzzyProductMatcher,
    )


def sync_open_orders_from_carrier(
    *,
    fetcher: OpenOrderFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
    max_pages: int | None = None,
    enhance: bool | None = None,
) -> SyncOrdersResult:
    """Run one sync cycle against the carrier using the configured adapters."""

    config = sync_config or get_sync_config()
    pages = max_pages if max_pages is not None else config.max_pages
    should_enhance = config.enhance if enhance is None else enhance

    if unit_of_work_factory is None:
        _ensure_started()
    effective_fetcher = fetcher or CarrierFetcher(config=get_carrier_config(max_pages=pages))
    log.info(
        "Starting open-order sync: max_pages=%s, enhance=%s, collect_tag=%s",
        pages,
        should_enhance,
        config.collect_tag,
    )

    result = sync_open_orders(
        fetcher=effective_fetcher,
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyOrderSyncUnitOfWork,
        merger=build_merger(config),
        enhancement=build_enhancement_pipeline() if should_enhance else None,
    )

    log.info(
        f"Finished open-order sync: orders={result.fetched_orders}, "
        f"lines={result.line_items}, added={result.added}, removed={result.removed}, "
        f"refreshed={result.refreshed}, written={result.written}"
    )
    return result


def enhance_orders(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> EnhancementResult:
    """Backfill customer names and product images on the stored order lines."""

    if unit_of_work_factory is None:
        _ensure_started()
    return enhance_order_lines(
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyOrderSyncUnitOfWork,
        pipeline=build_enhancement_pipeline(),
    )


def import_product_catalog(
    path: Path,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> int:
    """Load ``name,image`` rows from a CSV file into the product catalog.

    Header names are matched case-insensitively. Rows missing either value are
    skipped. Returns the number of entries stored.
    """

    if unit_of_work_factory is None:
        _ensure_started()

    entries: list[tuple[str, str]] = []
    skipped = 0
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            normalized = {
                key.strip().lower(): (value or "").strip()
                for key, value in row.items()
                if key is not None
            }
            name = normalized.get("name", "")
            image = normalized.get("image", "")
            if not name or not image:
                skipped += 1
                continue
            entries.append((name, image))

    with (unit_of_work_factory or SqlAlchemyOrderSyncUnitOfWork)() as uow:
        for name, image in entries:
            uow.repositories.catalog.add(name, image)
        uow.commit()

    if skipped:
        log.warning("Skipped %s catalog rows without a name or image", skipped)
    log.info("Imported %s catalog entries from %s", len(entries), path)
    return len(entries)


def list_order_lines(
    *,
    order_id: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[OrderLineRecord]:
    if unit_of_work_factory is None:
        _ensure_started()
    with (unit_of_work_factory or SqlAlchemyOrderSyncUnitOfWork)() as uow:
        repository = uow.repositories.order_lines
        if order_id is not None:
            return repository.list_by_order(order_id)
        return repository.list_all()
