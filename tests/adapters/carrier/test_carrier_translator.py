from __future__ import annotations

import json
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from shipsync.adapters.carrier.translator import (
    decode_page,
    extract_customer_names,
    parse_open_order,
    parse_open_orders,
    parse_order_date,
)
from shipsync.domain.ports.fetching import MalformedResponseError
from tests.helpers.orders import order_payload, success_envelope


def test_parse_open_order() -> None:
    order = parse_open_order(order_payload(1001, tags=["PPCOD"]))

    assert order.order_id == "1001"
    assert order.order_total == Decimal("300.00")
    assert order.tags == frozenset({"PPCOD"})
    assert order.order_date == datetime(2025, 2, 28, 18, 45, tzinfo=UTC)
    assert order.pincode == "560001"
    assert [(item.product_code, item.price) for item in order.line_items] == [
        ("SKU-1", Decimal("100.00")),
        ("SKU-2", Decimal("200.00")),
    ]


def test_products_without_code_are_skipped() -> None:
    order = parse_open_order(
        order_payload(products=[{"product": "Mystery", "price": "5"}, {"product_code": "A"}])
    )

    assert [item.product_code for item in order.line_items] == ["A"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2025-02-28 18:45:00", datetime(2025, 2, 28, 18, 45, tzinfo=UTC)),
        ("2025-02-28T18:45:00+05:30", datetime(2025, 2, 28, 13, 15, tzinfo=UTC)),
        ("28-02-2025", datetime(2025, 2, 28, tzinfo=UTC)),
        ("yesterday", None),
        (None, None),
    ],
)
def test_parse_order_date(raw: str | None, expected: datetime | None) -> None:
    assert parse_order_date(raw) == expected


def test_invalid_entries_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    orders = parse_open_orders([{"order_total": "10"}, "not an order", order_payload(1001), None])

    assert [order.order_id for order in orders] == ["1001"]
    assert "Skipping invalid open order entry 1" in caplog.text
    assert "Skipping invalid open order entry 2" in caplog.text


def test_decode_page_rejects_invalid_json() -> None:
    with pytest.raises(MalformedResponseError):
        decode_page("<html>maintenance</html>")


def test_extract_customer_names_from_cached_pages() -> None:
    pages = [
        success_envelope(order_payload(1001), order_payload("1002", first_name="", last_name="")),
        json.dumps({"orders": [order_payload("1003", first_name="Ravi", last_name="Kumar")]}),
        "not json",
    ]

    assert extract_customer_names(pages) == {"1001": "Asha Rao", "1003": "Ravi Kumar"}
