"""Domain model for goods-receipt reconciliation."""

from __future__ import annotations

from .dates import (
    NO_DATE,
    NOT_APPLICABLE,
    DateValue,
    KnownDate,
    NotApplicable,
    UnparseableDate,
    parse_date,
    to_date_value,
)
from .purchasing import PurchaseOrder, PurchaseOrderLineItem
from .quantities import ZERO, parse_quantity, quantity_or_zero
from .receipts import (
    BatchEntry,
    BatchListEntry,
    LegacyEntry,
    PostedBatch,
    SelectedItemEntry,
    UnloadingReport,
    normalize_lot_number,
    normalize_product_name,
)

__all__ = [
    "NOT_APPLICABLE",
    "NO_DATE",
    "ZERO",
    "BatchEntry",
    "BatchListEntry",
    "DateValue",
    "KnownDate",
    "LegacyEntry",
    "NotApplicable",
    "PostedBatch",
    "PurchaseOrder",
    "PurchaseOrderLineItem",
    "SelectedItemEntry",
    "UnloadingReport",
    "UnparseableDate",
    "normalize_lot_number",
    "normalize_product_name",
    "parse_date",
    "parse_quantity",
    "quantity_or_zero",
    "to_date_value",
]
