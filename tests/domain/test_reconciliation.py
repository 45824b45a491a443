from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from shipsync.domain.model import ClaimStatus, PaymentType
from shipsync.domain.payment import COLLECT_TAG
from shipsync.domain.reconciliation import ReconciliationMerger
from tests.helpers.orders import make_order, make_record

TWO_ITEMS = (("SKU-1", "Home Jersey - M", "100.00"), ("SKU-2", "Away Jersey - L", "200.00"))


def test_first_sync_assigns_sequential_ids_and_defaults() -> None:
    result = ReconciliationMerger().merge([], [make_order(items=TWO_ITEMS)])

    assert result.changed is True
    assert [row.surrogate_id for row in result.rows] == [1, 2]
    assert result.added == [("1001", "SKU-1"), ("1001", "SKU-2")]
    first, second = result.rows
    assert first.status is ClaimStatus.UNCLAIMED
    assert first.claimed_by is None
    assert first.customer_name is None
    assert first.product_image is None
    assert (first.allocation_ratio, first.allocated_total) == (1, Decimal("100.00"))
    assert (second.allocation_ratio, second.allocated_total) == (2, Decimal("200.00"))
    assert second.selling_price == Decimal("200.00")
    assert second.order_total == Decimal("300.00")


def test_unchanged_fetch_is_a_no_op() -> None:
    merger = ReconciliationMerger()
    orders = [make_order(items=TWO_ITEMS)]
    first = merger.merge([], orders)

    second = merger.merge(first.rows, orders)

    assert second.changed is False
    assert second.needs_write is False
    assert second.refreshed == 0
    assert [row.surrogate_id for row in second.rows] == [1, 2]
    assert second.rows == first.rows


def test_claim_state_survives_price_change() -> None:
    claimed_at = datetime(2025, 2, 1, 10, tzinfo=UTC)
    existing = make_record(
        7,
        status=ClaimStatus.CLAIMED,
        claimed_by="V1",
        claimed_at=claimed_at,
        label_downloaded=True,
        customer_name="Asha Rao",
        product_image="/img/home.png",
        version=3,
    )
    order = make_order(total="120.00", items=(("SKU-1", "Home Jersey - M", "120.00"),))

    result = ReconciliationMerger().merge([existing], [order])

    assert result.changed is False
    assert result.refreshed == 1
    assert result.needs_write is True
    (row,) = result.rows
    assert row.surrogate_id == 7
    assert row.version == 3
    assert row.status is ClaimStatus.CLAIMED
    assert row.claimed_by == "V1"
    assert row.claimed_at == claimed_at
    assert row.label_downloaded is True
    assert row.customer_name == "Asha Rao"
    assert row.product_image == "/img/home.png"
    assert row.selling_price == Decimal("120.00")
    assert row.allocated_total == Decimal("120.00")


def test_vanished_key_is_dropped() -> None:
    existing = [
        make_record(1, product_code="SKU-1"),
        make_record(2, product_code="SKU-2", status=ClaimStatus.CLAIMED, claimed_by="V9"),
    ]
    order = make_order(items=(("SKU-1", "Home Jersey - M", "100.00"),), total="100.00")

    result = ReconciliationMerger().merge(existing, [order])

    assert result.changed is True
    assert result.removed == [("1001", "SKU-2")]
    assert [row.product_code for row in result.rows] == ["SKU-1"]


def test_new_key_gets_previous_max_plus_one() -> None:
    existing = [make_record(4, product_code="SKU-1"), make_record(9, product_code="SKU-2")]
    orders = [
        make_order(items=(("SKU-1", "A", "1.00"), ("SKU-2", "B", "1.00")), total="2.00"),
        make_order("1002", items=(("SKU-9", "C", "5.00"),), total="5.00"),
    ]

    result = ReconciliationMerger().merge(existing, orders)

    assert {row.key: row.surrogate_id for row in result.rows} == {
        ("1001", "SKU-1"): 4,
        ("1001", "SKU-2"): 9,
        ("1002", "SKU-9"): 10,
    }
    assert result.max_surrogate_id == 10

    again = ReconciliationMerger().merge(result.rows, orders)
    assert {row.key: row.surrogate_id for row in again.rows} == {
        ("1001", "SKU-1"): 4,
        ("1001", "SKU-2"): 9,
        ("1002", "SKU-9"): 10,
    }


def test_id_floor_prevents_reuse_after_removal() -> None:
    result = ReconciliationMerger().merge(
        [make_record(3)],
        [make_order("2001", items=(("SKU-7", "Kit", "10.00"),), total="10.00")],
        id_floor=12,
    )

    (row,) = result.rows
    assert row.surrogate_id == 13


def test_collect_orders_split_advance_per_line() -> None:
    order = make_order(items=TWO_ITEMS, tags=[COLLECT_TAG])

    result = ReconciliationMerger().merge([], [order])

    first, second = result.rows
    assert first.payment_type is PaymentType.COLLECT
    assert (first.prepaid_amount, first.collectable_amount) == (
        Decimal("10.00"),
        Decimal("90.00"),
    )
    assert (second.prepaid_amount, second.collectable_amount) == (
        Decimal("20.00"),
        Decimal("180.00"),
    )


def test_duplicate_keys_in_fetch_keep_first(caplog: pytest.LogCaptureFixture) -> None:
    order = make_order(
        items=(("SKU-1", "First", "10.00"), ("SKU-1", "Second", "10.00")),
        total="20.00",
    )

    result = ReconciliationMerger().merge([], [order])

    (row,) = result.rows
    assert row.product_name == "First"
    assert row.surrogate_id == 1
    assert row.allocated_total == Decimal("20.00")
    assert "Duplicate line item 1001/SKU-1" in caplog.text


def test_duplicate_keys_are_dropped_before_the_split() -> None:
    order = make_order(
        items=(
            ("SKU-1", "Home Jersey - M", "100.00"),
            ("SKU-1", "Home Jersey - M", "50.00"),
            ("SKU-2", "Away Jersey - L", "200.00"),
        ),
        total="300.00",
    )

    result = ReconciliationMerger().merge([], [order])

    assert [row.allocation_ratio for row in result.rows] == [1, 2]
    assert [row.allocated_total for row in result.rows] == [Decimal("100.00"), Decimal("200.00")]
    assert sum(row.allocated_total for row in result.rows) == Decimal("300.00")


def test_repeated_order_keeps_first_entry() -> None:
    first = make_order(items=TWO_ITEMS)
    repeat = make_order(items=(("SKU-3", "Third Kit - S", "50.00"),), total="50.00")

    result = ReconciliationMerger().merge([], [first, repeat])

    assert [row.product_code for row in result.rows] == ["SKU-1", "SKU-2"]
    assert sum(row.allocated_total for row in result.rows) == Decimal("300.00")


def test_order_without_line_items_contributes_nothing() -> None:
    result = ReconciliationMerger().merge([], [make_order(items=())])

    assert result.rows == []
    assert result.changed is False
