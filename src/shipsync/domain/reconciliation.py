"""Merge freshly fetched open orders with the persisted order-line records.

Incoming line items are keyed by ``(order_id, product_code)``. A key that was
already persisted keeps its surrogate id, its claim workflow state and any
enrichment already filled in; upstream and financial columns are always
recomputed from the fetch. Keys seen for the first time get the next surrogate
id. Keys that are no longer reported upstream are dropped: the result is the
complete active set, not an accumulating log.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING

from .allocation import RatioSplitCalculator
from .model import (
    ENRICHMENT_FIELDS,
    FINANCIAL_FIELDS,
    UPSTREAM_FIELDS,
    WORKFLOW_FIELDS,
    OrderLineKey,
    OrderLineRecord,
    round_currency,
)
from .payment import PaymentClassifier

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from decimal import Decimal

    from .allocation import LineAllocation
    from .model import UpstreamLineItem, UpstreamOrder

log = getLogger(__name__)


@dataclass(slots=True)
class MergeResult:
    """Outcome of one merge pass.

    ``changed`` reflects only whether the active key set moved (keys added or
    removed). ``refreshed`` counts persisting keys whose upstream or financial
    columns differ from what was stored.
    """

    rows: list[OrderLineRecord]
    changed: bool
    added: list[OrderLineKey] = field(default_factory=list[OrderLineKey])
    removed: list[OrderLineKey] = field(default_factory=list[OrderLineKey])
    refreshed: int = 0
    max_surrogate_id: int = 0

    @property
    def needs_write(self) -> bool:
        return self.changed or self.refreshed > 0


@dataclass(slots=True, frozen=True)
class ReconciliationMerger:
    calculator: RatioSplitCalculator = field(default_factory=RatioSplitCalculator)
    classifier: PaymentClassifier = field(default_factory=PaymentClassifier)

    def merge(
        self,
        existing_rows: Iterable[OrderLineRecord],
        incoming_orders: Iterable[UpstreamOrder],
        *,
        id_floor: int = 0,
    ) -> MergeResult:
        """Build the new active record set from ``incoming_orders``.

        ``id_floor`` is the highest surrogate id ever handed out; new ids start
        above both it and the largest id among ``existing_rows`` so an id is
        never reused after its row disappeared.
        """

        existing_by_key: dict[OrderLineKey, OrderLineRecord] = {}
        for row in existing_rows:
            existing_by_key.setdefault(row.key, row)
        last_id = max((row.surrogate_id for row in existing_by_key.values()), default=0)
        last_id = max(last_id, id_floor)

        rows: list[OrderLineRecord] = []
        added: list[OrderLineKey] = []
        seen: set[OrderLineKey] = set()
        refreshed = 0

        for fresh in self._derive_records(incoming_orders):
            seen.add(fresh.key)

            previous = existing_by_key.get(fresh.key)
            if previous is None:
                last_id += 1
                rows.append(replace(fresh, surrogate_id=last_id))
                added.append(fresh.key)
                continue

            record = _carry_over(previous, fresh)
            if _upstream_differs(previous, record):
                refreshed += 1
            rows.append(record)

        removed = [key for key in existing_by_key if key not in seen]
        return MergeResult(
            rows=rows,
            changed=bool(added or removed),
            added=added,
            removed=removed,
            refreshed=refreshed,
            max_surrogate_id=last_id,
        )

    def _derive_records(self, orders: Iterable[UpstreamOrder]) -> Iterator[OrderLineRecord]:
        seen_orders: set[str] = set()
        for order in orders:
            if order.order_id in seen_orders:
                log.warning(
                    "Order %s repeated in upstream fetch; keeping the first", order.order_id
                )
                continue
            seen_orders.add(order.order_id)

            line_items = _unique_line_items(order)
            if not line_items:
                log.debug("Order %s has no line items", order.order_id)
                continue
            # Shares are split over the surviving items only.
            order_total = round_currency(order.order_total)
            allocations = self.calculator.split(order_total, [item.price for item in line_items])
            for item, allocation in zip(line_items, allocations, strict=True):
                yield self._derive_record(order, order_total, item, allocation)

    def _derive_record(
        self,
        order: UpstreamOrder,
        order_total: Decimal,
        item: UpstreamLineItem,
        allocation: LineAllocation,
    ) -> OrderLineRecord:
        payment = self.classifier.classify(order.tags, order_total, allocation.amount)
        return OrderLineRecord(
            surrogate_id=0,
            order_id=order.order_id,
            product_code=item.product_code,
            product_name=item.product_name,
            order_date=order.order_date,
            quantity=item.quantity,
            pincode=order.pincode,
            selling_price=round_currency(item.price),
            order_total=order_total,
            payment_type=payment.payment_type,
            prepaid_amount=payment.prepaid_amount,
            allocation_ratio=allocation.ratio,
            allocated_total=allocation.amount,
            collectable_amount=payment.collectable_amount,
        )


def _unique_line_items(order: UpstreamOrder) -> list[UpstreamLineItem]:
    items: dict[str, UpstreamLineItem] = {}
    for item in order.line_items:
        if item.product_code in items:
            log.warning(
                "Duplicate line item %s/%s in upstream fetch; keeping the first",
                order.order_id,
                item.product_code,
            )
            continue
        items[item.product_code] = item
    return list(items.values())


def _carry_over(previous: OrderLineRecord, fresh: OrderLineRecord) -> OrderLineRecord:
    kept: dict[str, object] = {name: getattr(previous, name) for name in WORKFLOW_FIELDS}
    for name in ENRICHMENT_FIELDS:
        value = getattr(previous, name)
        if value:
            kept[name] = value
    return replace(
        fresh,
        surrogate_id=previous.surrogate_id,
        version=previous.version,
        **kept,  # pyright: ignore[reportArgumentType]
    )


def _upstream_differs(previous: OrderLineRecord, current: OrderLineRecord) -> bool:
    return any(
        getattr(previous, name) != getattr(current, name)
        for name in (*UPSTREAM_FIELDS, *FINANCIAL_FIELDS)
    )
