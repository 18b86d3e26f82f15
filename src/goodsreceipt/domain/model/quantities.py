"""Quantity parsing for free-text warehouse input."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

ZERO = Decimal(0)


def parse_quantity(value: object) -> Decimal | None:
    """Parse a reported quantity; ``None`` when the value is absent or not a number.

    Operators type quantities by hand, so both ``"12.5"`` and ``"12,5"`` are accepted.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int | float):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(" ", "").replace(",", ".")
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    if not number.is_finite():
        return None
    return number


def quantity_or_zero(value: object) -> Decimal:
    parsed = parse_quantity(value)
    return ZERO if parsed is None else parsed
