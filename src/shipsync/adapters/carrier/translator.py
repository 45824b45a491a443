"""Translate carrier payloads into domain order shapes."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from shipsync.domain.enrichment.customers import build_customer_name_map
from shipsync.domain.model import UpstreamLineItem, UpstreamOrder
from shipsync.domain.ports.fetching import MalformedResponseError

from .schema import CustomerNamePayload, OrderPayload, extract_order_payloads

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

log = getLogger(__name__)

_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d", "%d-%m-%Y %H:%M:%S", "%d-%m-%Y")


def parse_order_date(value: str | None) -> datetime | None:
    """Parse an upstream order date; naive values are taken as UTC."""

    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        parsed = None
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)  # noqa: DTZ007
                break
            except ValueError:
                continue
    if parsed is None:
        log.warning("Unparseable order date %r; storing none", value)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_open_order(payload: OrderPayload | object) -> UpstreamOrder:
    order = payload if isinstance(payload, OrderPayload) else OrderPayload.model_validate(payload)
    line_items: list[UpstreamLineItem] = []
    for product in order.products:
        if not product.product_code:
            log.warning("Order %s has a product without a code; skipping it", order.order_id)
            continue
        line_items.append(
            UpstreamLineItem(
                product_code=product.product_code,
                product_name=product.name,
                price=product.price,
                quantity=product.quantity,
            )
        )
    return UpstreamOrder(
        order_id=order.order_id,
        order_total=order.order_total,
        line_items=tuple(line_items),
        order_date=parse_order_date(order.order_date),
        tags=frozenset(order.order_tags),
        pincode=order.pincode,
    )


def decode_page(body: str) -> list[object]:
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Open-orders response is not valid JSON: {exc}") from exc
    return extract_order_payloads(payload)


def parse_open_orders(raw_orders: Sequence[object]) -> list[UpstreamOrder]:
    """Translate every valid order entry; invalid entries are logged and skipped."""

    orders: list[UpstreamOrder] = []
    for index, raw in enumerate(raw_orders, start=1):
        try:
            orders.append(parse_open_order(raw))
        except ValidationError as exc:
            log.warning(
                "Skipping invalid open order entry %s (%s validation errors)",
                index,
                exc.error_count(),
            )
    return orders


def _customer_entries(raw_pages: Sequence[str]) -> Iterator[tuple[str, str | None, str | None]]:
    for index, body in enumerate(raw_pages, start=1):
        try:
            raw_orders = decode_page(body)
        except MalformedResponseError:
            log.warning("Cached payload page %s is unreadable; skipping it", index)
            continue
        for raw in raw_orders:
            try:
                entry = CustomerNamePayload.model_validate(raw)
            except ValidationError:
                continue
            if entry.order_id:
                yield entry.order_id, entry.s_firstname, entry.s_lastname


def extract_customer_names(raw_pages: Sequence[str]) -> dict[str, str]:
    """Build ``order_id -> customer name`` from cached raw response bodies."""

    return build_customer_name_map(_customer_entries(raw_pages))
