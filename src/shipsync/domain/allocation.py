"""Integer-ratio split of an order total across its line items.

Each line item's price is converted to cents and the ratios are the cents
divided by their greatest common divisor, so ``[100.00, 200.00]`` becomes
``[1, 2]``. The order total is then divided in that proportion and every share
is rounded to cents independently. The rounding remainder is not pushed back
into any item unless ``distribute_remainder`` is requested, so the shares may
drift from the total by at most one cent per line item.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from logging import getLogger
from typing import TYPE_CHECKING

from .model import ZERO, round_currency

if TYPE_CHECKING:
    from collections.abc import Sequence

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class LineAllocation:
    ratio: int
    amount: Decimal


def to_cents(value: Decimal) -> int:
    return int(round_currency(value) * 100)


def allocation_ratios(prices: Sequence[Decimal]) -> list[int]:
    """Return the GCD-reduced integer ratio for each price.

    Zero (or negative) prices get a ratio of 1. When no price is positive the
    split degrades to one equal share per item.
    """

    if not prices:
        return []
    cents = [to_cents(price) for price in prices]
    positive = [value for value in cents if value > 0]
    if not positive:
        log.debug("No positive prices among %s line items; splitting equally", len(cents))
        return [1] * len(cents)
    divisor = math.gcd(*positive)
    return [value // divisor if value > 0 else 1 for value in cents]


def allocate_by_ratio(
    order_total: Decimal | None,
    ratios: Sequence[int],
    *,
    distribute_remainder: bool = False,
) -> list[Decimal]:
    if not ratios:
        return []
    total = order_total if order_total is not None else ZERO
    total_ratio = sum(ratios)
    shares = [round_currency(total * ratio / total_ratio) for ratio in ratios]

    if distribute_remainder:
        remainder = round_currency(total) - sum(shares, ZERO)
        if remainder:
            largest = max(range(len(ratios)), key=ratios.__getitem__)
            shares[largest] += remainder
    return shares


def allocate(
    order_total: Decimal | None,
    prices: Sequence[Decimal],
    *,
    distribute_remainder: bool = False,
) -> list[Decimal]:
    """Split ``order_total`` across ``prices``; result has one share per price."""

    return allocate_by_ratio(
        order_total,
        allocation_ratios(prices),
        distribute_remainder=distribute_remainder,
    )


@dataclass(slots=True, frozen=True)
class RatioSplitCalculator:
    distribute_remainder: bool = False

    def allocate(self, order_total: Decimal | None, prices: Sequence[Decimal]) -> list[Decimal]:
        return allocate(order_total, prices, distribute_remainder=self.distribute_remainder)

    def split(
        self, order_total: Decimal | None, prices: Sequence[Decimal]
    ) -> list[LineAllocation]:
        ratios = allocation_ratios(prices)
        amounts = allocate_by_ratio(
            order_total,
            ratios,
            distribute_remainder=self.distribute_remainder,
        )
        return [
            LineAllocation(ratio=ratio, amount=amount)
            for ratio, amount in zip(ratios, amounts, strict=True)
        ]
