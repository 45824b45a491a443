"""Order-line records and the upstream order shapes they are derived from."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from typing import Final

CENT: Final[Decimal] = Decimal("0.01")
ZERO: Final[Decimal] = Decimal("0.00")

CUSTOMER_NAME_PLACEHOLDER: Final[str] = "N/A"
PRODUCT_IMAGE_PLACEHOLDER: Final[str] = "/placeholder.svg"

type OrderLineKey = tuple[str, str]


class PaymentType(StrEnum):
    PREPAID = "prepaid"
    COLLECT = "collect"


class ClaimStatus(StrEnum):
    UNCLAIMED = "unclaimed"
    CLAIMED = "claimed"
    READY_FOR_HANDOVER = "ready_for_handover"


def round_currency(value: Decimal) -> Decimal:
    """Round to whole cents, halves away from zero."""

    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(slots=True, frozen=True)
class UpstreamLineItem:
    product_code: str
    product_name: str
    price: Decimal
    quantity: int = 1


@dataclass(slots=True, frozen=True)
class UpstreamOrder:
    """One open order as reported by the carrier, already validated."""

    order_id: str
    order_total: Decimal
    line_items: tuple[UpstreamLineItem, ...]
    order_date: datetime | None = None
    tags: frozenset[str] = field(default_factory=frozenset[str])
    pincode: str | None = None


# Columns refreshed from upstream on every resync.
UPSTREAM_FIELDS: Final[tuple[str, ...]] = (
    "order_id",
    "product_code",
    "product_name",
    "order_date",
    "quantity",
    "pincode",
)

# Derived every resync, never carried over.
FINANCIAL_FIELDS: Final[tuple[str, ...]] = (
    "selling_price",
    "order_total",
    "payment_type",
    "prepaid_amount",
    "allocation_ratio",
    "allocated_total",
    "collectable_amount",
)

# Owned by the external claim workflow; carried over verbatim.
WORKFLOW_FIELDS: Final[tuple[str, ...]] = (
    "status",
    "claimed_by",
    "claimed_at",
    "last_claimed_by",
    "last_claimed_at",
    "clone_status",
    "cloned_order_id",
    "is_cloned_row",
    "label_downloaded",
    "handover_at",
)

ENRICHMENT_FIELDS: Final[tuple[str, ...]] = ("customer_name", "product_image")


@dataclass(slots=True)
class OrderLineRecord:
    """Persisted state of one product within one open order."""

    surrogate_id: int
    order_id: str
    product_code: str
    product_name: str
    order_date: datetime | None = None
    quantity: int = 1
    pincode: str | None = None

    selling_price: Decimal = ZERO
    order_total: Decimal = ZERO
    payment_type: PaymentType = PaymentType.PREPAID
    prepaid_amount: Decimal = ZERO
    allocation_ratio: int = 1
    allocated_total: Decimal = ZERO
    collectable_amount: Decimal = ZERO

    status: ClaimStatus = ClaimStatus.UNCLAIMED
    claimed_by: str | None = None
    claimed_at: datetime | None = None
    last_claimed_by: str | None = None
    last_claimed_at: datetime | None = None
    clone_status: str | None = None
    cloned_order_id: str | None = None
    is_cloned_row: bool = False
    label_downloaded: bool = False
    handover_at: datetime | None = None

    customer_name: str | None = None
    product_image: str | None = None

    version: int = 0

    @property
    def key(self) -> OrderLineKey:
        return (self.order_id, self.product_code)

    @property
    def needs_customer_name(self) -> bool:
        return self.customer_name in (None, "", CUSTOMER_NAME_PLACEHOLDER)

    @property
    def needs_product_image(self) -> bool:
        return self.product_image in (None, "", PRODUCT_IMAGE_PLACEHOLDER)

    def workflow_state(self) -> dict[str, object]:
        return {name: getattr(self, name) for name in WORKFLOW_FIELDS}
