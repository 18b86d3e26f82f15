"""Candidate spellings of a purchase-order number for report lookups.

Unloading reports are typed in by warehouse staff, so the same order shows up as
``PO-2024-017`` in one report and ``2024-017`` in another. Lookups query every
candidate and union the results.
"""

from __future__ import annotations

DEFAULT_PREFIX = "PO-"


def order_number_variants(
    number: str | None,
    *,
    order_id: str | None = None,
    prefix: str = DEFAULT_PREFIX,
) -> tuple[str, ...]:
    """Return the distinct lookup strings for ``number`` in a stable order.

    The first element is always the number as stored on the order. An empty tuple
    means the order has no number to look reports up by.
    """

    base = (number or "").strip()
    if not base:
        return ()

    candidates: list[str] = [base]
    if prefix:
        if base.upper().startswith(prefix.upper()):
            candidates.append(base[len(prefix) :].strip())
        else:
            candidates.append(f"{prefix}{base}")
    if order_id is not None:
        candidates.append(order_id.strip())

    variants: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in variants:
            variants.append(candidate)
    return tuple(variants)
