from __future__ import annotations

from decimal import Decimal

import pytest

from goodsreceipt.domain.model import ZERO, parse_quantity, quantity_or_zero


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("40", Decimal(40)),
        ("12,5", Decimal("12.5")),
        (" 1 200 ", Decimal(1200)),
        (7, Decimal(7)),
        (2.5, Decimal("2.5")),
        (Decimal("0.125"), Decimal("0.125")),
    ],
)
def test_parse_quantity_accepts_operator_input(raw: object, expected: Decimal) -> None:
    assert parse_quantity(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "  ", "forty", True, "NaN", "inf", [], {}])
def test_parse_quantity_rejects_non_numbers(raw: object) -> None:
    assert parse_quantity(raw) is None


def test_quantity_or_zero_defaults() -> None:
    assert quantity_or_zero("oops") == ZERO
    assert quantity_or_zero("3") == Decimal(3)
