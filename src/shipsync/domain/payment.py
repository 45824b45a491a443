"""Prepaid vs. collect-on-delivery classification of line items."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Final

from .model import ZERO, PaymentType, round_currency

if TYPE_CHECKING:
    from collections.abc import Iterable

COLLECT_TAG: Final[str] = "PPCOD"
COLLECT_ADVANCE_RATE: Final[Decimal] = Decimal("0.10")


@dataclass(slots=True, frozen=True)
class PaymentSplit:
    payment_type: PaymentType
    prepaid_amount: Decimal
    collectable_amount: Decimal


@dataclass(slots=True, frozen=True)
class PaymentClassifier:
    """Derive the payment type from order tags and split each allocated share.

    Collect orders are treated as having a flat advance of ``advance_rate`` of the
    line item's allocated total; the rest is collected on delivery.
    """

    collect_tag: str = COLLECT_TAG
    advance_rate: Decimal = COLLECT_ADVANCE_RATE

    def payment_type(self, order_tags: Iterable[str]) -> PaymentType:
        if self.collect_tag in {tag.strip() for tag in order_tags}:
            return PaymentType.COLLECT
        return PaymentType.PREPAID

    def classify(
        self,
        order_tags: Iterable[str],
        order_total: Decimal,
        allocated_total: Decimal,
    ) -> PaymentSplit:
        del order_total  # shares are derived from the line item's allocation only
        payment_type = self.payment_type(order_tags)
        if payment_type is PaymentType.PREPAID:
            return PaymentSplit(
                payment_type=payment_type,
                prepaid_amount=allocated_total,
                collectable_amount=ZERO,
            )
        prepaid = round_currency(allocated_total * self.advance_rate)
        return PaymentSplit(
            payment_type=payment_type,
            prepaid_amount=prepaid,
            collectable_amount=allocated_total - prepaid,
        )
