"""Unloading reports and posted inventory batches.

Report entries come in two historical shapes. Older reports carry a single
quantity and expiry per selected item (``LegacyEntry``); current reports carry a
list of lots (``BatchListEntry``). Both shapes can coexist for the same order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .dates import NO_DATE, DateValue

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal


def normalize_lot_number(value: str | None) -> str:
    """Lot identity used for ledger comparisons: trimmed and lower-cased."""

    return (value or "").strip().lower()


def normalize_product_name(value: str | None) -> str:
    return (value or "").strip().lower()


@dataclass(frozen=True, slots=True, kw_only=True)
class BatchEntry:
    """A delivered lot as reported by the warehouse.

    ``synthesized`` marks the stand-in lot built for a legacy entry, which never
    had a batch of its own.
    """

    batch_number: str | None = None
    unloaded_quantity: str | None = None
    expiry: DateValue = NO_DATE
    source_report_id: str | None = None
    source_report_date: date | None = None
    synthesized: bool = False

    @property
    def lot_key(self) -> str:
        return normalize_lot_number(self.batch_number)


@dataclass(frozen=True, slots=True, kw_only=True)
class LegacyEntry:
    po_item_id: str | None = None
    product_name: str | None = None
    unloaded_quantity: str | None = None
    expiry: DateValue = NO_DATE


@dataclass(frozen=True, slots=True, kw_only=True)
class BatchListEntry:
    po_item_id: str | None = None
    product_name: str | None = None
    batches: tuple[BatchEntry, ...]

    def __post_init__(self) -> None:
        if not self.batches:
            raise ValueError("Batch-list entries must include at least one batch")


type SelectedItemEntry = LegacyEntry | BatchListEntry


@dataclass(frozen=True, slots=True, kw_only=True)
class UnloadingReport:
    """A warehouse delivery event, never mutated by reconciliation."""

    id: str
    order_number_variants: frozenset[str] = frozenset()
    filled_at: date | None = None
    selected_items: tuple[SelectedItemEntry, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class PostedBatch:
    """A lot already recorded in inventory for an order line."""

    lot_number: str | None
    quantity: Decimal | None = None

    @property
    def lot_key(self) -> str:
        return normalize_lot_number(self.lot_number)
