from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from shipsync.app import import_product_catalog, list_order_lines, sync_open_orders_from_carrier
from shipsync.config import SyncConfig
from shipsync.domain.model import PaymentType
from tests.helpers.orders import (
    FakeOpenOrderFetcher,
    FakeOrderLineRepository,
    FakeOrderSyncRepositories,
    FakeUnitOfWorkFactory,
    make_order,
    make_record,
)

if TYPE_CHECKING:
    from pathlib import Path


def test_sync_uses_configured_collect_tag() -> None:
    factory = FakeUnitOfWorkFactory()
    fetcher = FakeOpenOrderFetcher(
        [
            make_order("1001", total="100.00", tags=["COD"]),
            make_order("1002", total="100.00", tags=["PPCOD"]),
        ]
    )

    result = sync_open_orders_from_carrier(
        fetcher=fetcher,
        unit_of_work_factory=factory,
        sync_config=SyncConfig(collect_tag="COD", collect_advance_rate=Decimal("0.20")),
        enhance=False,
    )

    rows = factory.repositories.order_lines.list_all()
    assert result.enhancement is None
    assert [row.payment_type for row in rows] == [PaymentType.COLLECT, PaymentType.PREPAID]
    assert rows[0].prepaid_amount == Decimal("20.00")
    assert rows[0].collectable_amount == Decimal("80.00")


def test_sync_enhances_by_default() -> None:
    factory = FakeUnitOfWorkFactory()

    result = sync_open_orders_from_carrier(
        fetcher=FakeOpenOrderFetcher([make_order()]),
        unit_of_work_factory=factory,
        sync_config=SyncConfig(),
    )

    assert result.enhancement is not None
    assert result.enhancement.name_misses == 1
    assert factory.repositories.order_lines.get(1).customer_name == "N/A"


def test_import_product_catalog(tmp_path: Path) -> None:
    path = tmp_path / "catalog.csv"
    path.write_text(
        "\ufeffName , IMAGE\n"
        "Home Jersey,/img/home.png\n"
        "Away Jersey,\n"
        ",/img/orphan.png\n"
        " Third Kit , /img/third.png ,extra\n",
        encoding="utf-8",
    )
    factory = FakeUnitOfWorkFactory()

    imported = import_product_catalog(path, unit_of_work_factory=factory)

    assert imported == 2
    assert factory.repositories.catalog.image_map() == {
        "Home Jersey": "/img/home.png",
        "Third Kit": "/img/third.png",
    }
    assert factory.created[0].committed is True


def test_list_order_lines_filters_by_order() -> None:
    factory = FakeUnitOfWorkFactory(
        FakeOrderSyncRepositories(
            order_lines=FakeOrderLineRepository(
                [make_record(1), make_record(2, order_id="1002"), make_record(3, product_code="B")]
            )
        )
    )

    assert [row.surrogate_id for row in list_order_lines(unit_of_work_factory=factory)] == [
        1,
        2,
        3,
    ]
    assert [
        row.surrogate_id for row in list_order_lines(order_id="1001", unit_of_work_factory=factory)
    ] == [1, 3]
