from __future__ import annotations

from decimal import Decimal

import pytest

from shipsync.domain.allocation import (
    RatioSplitCalculator,
    allocate,
    allocation_ratios,
)


def _d(*values: str) -> list[Decimal]:
    return [Decimal(value) for value in values]


def test_ratio_is_gcd_reduced_cents() -> None:
    assert allocation_ratios(_d("100.00", "200.00")) == [1, 2]
    assert allocation_ratios(_d("499.50", "999.00", "249.75")) == [2, 4, 1]


def test_reference_split_reproduces_prices() -> None:
    assert allocate(Decimal("300.00"), _d("100.00", "200.00")) == _d("100.00", "200.00")


def test_single_line_item_gets_whole_total() -> None:
    assert allocation_ratios(_d("799.00")) == [1]
    assert allocate(Decimal("849.00"), _d("799.00")) == _d("849.00")


def test_all_zero_prices_split_equally() -> None:
    assert allocation_ratios(_d("0", "0", "0")) == [1, 1, 1]
    assert allocate(Decimal("100.00"), _d("0", "0", "0")) == _d("33.33", "33.33", "33.33")


def test_zero_priced_item_keeps_ratio_one() -> None:
    assert allocation_ratios(_d("0", "300.00", "150.00")) == [1, 2, 1]


def test_missing_total_allocates_zero() -> None:
    assert allocate(None, _d("100.00", "200.00")) == _d("0.00", "0.00")
    assert allocate(Decimal(0), _d("100.00")) == _d("0.00")


def test_empty_price_list() -> None:
    assert allocation_ratios([]) == []
    assert allocate(Decimal("10.00"), []) == []


def test_shares_round_half_up_to_cents() -> None:
    assert allocate(Decimal("0.05"), _d("1.00", "1.00")) == _d("0.03", "0.03")


@pytest.mark.parametrize(
    ("total", "prices"),
    [
        ("100.00", ("33.33", "33.33", "33.34")),
        ("1000.00", ("1.00", "1.00", "1.00", "1.00", "1.00", "1.00", "1.00")),
        ("999.99", ("0.01", "123.45", "678.90")),
        ("10.00", ("3.00", "3.00", "3.00")),
    ],
)
def test_shares_stay_within_one_cent_per_item(total: str, prices: tuple[str, ...]) -> None:
    shares = allocate(Decimal(total), _d(*prices))

    assert len(shares) == len(prices)
    assert abs(sum(shares) - Decimal(total)) <= Decimal("0.01") * len(prices)


def test_rounding_gap_is_kept_by_default() -> None:
    shares = allocate(Decimal("10.00"), _d("3.00", "3.00", "3.00"))

    assert shares == _d("3.33", "3.33", "3.33")
    assert sum(shares) == Decimal("9.99")


def test_distribute_remainder_goes_to_largest_ratio() -> None:
    calculator = RatioSplitCalculator(distribute_remainder=True)

    shares = calculator.allocate(Decimal("10.00"), _d("1.00", "2.00", "1.00"))

    assert shares == _d("2.50", "5.00", "2.50")
    assert calculator.allocate(Decimal("10.00"), _d("3.00", "3.00", "3.00")) == _d(
        "3.34", "3.33", "3.33"
    )


def test_split_pairs_ratio_with_amount() -> None:
    allocations = RatioSplitCalculator().split(Decimal("300.00"), _d("100.00", "200.00"))

    assert [(item.ratio, item.amount) for item in allocations] == [
        (1, Decimal("100.00")),
        (2, Decimal("200.00")),
    ]
