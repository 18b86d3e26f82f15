"""Translate raw warehouse documents into domain objects.

Validation is isolated per selected item and per batch: a malformed fragment is
logged and dropped, the rest of the document still reaches reconciliation.
"""

from __future__ import annotations

from datetime import datetime
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from goodsreceipt.domain.model import (
    BatchEntry,
    BatchListEntry,
    LegacyEntry,
    PostedBatch,
    PurchaseOrder,
    PurchaseOrderLineItem,
    UnloadingReport,
    parse_date,
    quantity_or_zero,
    to_date_value,
)

from .schema import (
    BatchPayload,
    PostedBatchPayload,
    PurchaseOrderItemPayload,
    PurchaseOrderPayload,
    SelectedItemPayload,
    UnloadingReportPayload,
)

if TYPE_CHECKING:
    from datetime import date

    from goodsreceipt.domain.model import SelectedItemEntry

    from .schema import DocumentInput

log = getLogger(__name__)


def translate_unloading_report(
    document_id: str,
    document: DocumentInput | UnloadingReportPayload,
) -> UnloadingReport:
    """Build an ``UnloadingReport``; raises ``ValidationError`` if the envelope is unusable."""

    payload = (
        document
        if isinstance(document, UnloadingReportPayload)
        else UnloadingReportPayload.model_validate(document)
    )
    entries: list[SelectedItemEntry] = []
    for index, raw_item in enumerate(payload.selected_items):
        try:
            entries.append(translate_selected_item(raw_item, report_id=document_id))
        except ValidationError as exc:
            log.warning(
                "Skipping malformed selected item %s in unloading report %s: %s",
                index,
                document_id,
                exc.errors(include_url=False),
            )

    variants = frozenset({payload.po_number}) if payload.po_number else frozenset[str]()
    return UnloadingReport(
        id=document_id,
        order_number_variants=variants,
        filled_at=_as_day(parse_date(payload.fill_date)),
        selected_items=tuple(entries),
    )


def translate_selected_item(
    raw_item: object,
    *,
    report_id: str | None = None,
) -> SelectedItemEntry:
    item = SelectedItemPayload.model_validate(raw_item)
    batches: list[BatchEntry] = []
    for index, raw_batch in enumerate(item.batches):
        try:
            batches.append(translate_batch(raw_batch))
        except ValidationError as exc:
            log.warning(
                "Skipping malformed batch %s of item %s in unloading report %s: %s",
                index,
                item.po_item_id,
                report_id,
                exc.errors(include_url=False),
            )

    if batches:
        return BatchListEntry(
            po_item_id=item.po_item_id,
            product_name=item.product_name,
            batches=tuple(batches),
        )
    return LegacyEntry(
        po_item_id=item.po_item_id,
        product_name=item.product_name,
        unloaded_quantity=item.unloaded_quantity,
        expiry=to_date_value(item.expiry_date, not_applicable=item.no_expiry_date),
    )


def translate_batch(raw_batch: object) -> BatchEntry:
    batch = BatchPayload.model_validate(raw_batch)
    return BatchEntry(
        batch_number=batch.batch_number,
        unloaded_quantity=batch.unloaded_quantity,
        expiry=to_date_value(batch.expiry_date, not_applicable=batch.no_expiry_date),
    )


def translate_posted_batch(document: DocumentInput | PostedBatchPayload) -> PostedBatch:
    payload = (
        document
        if isinstance(document, PostedBatchPayload)
        else PostedBatchPayload.model_validate(document)
    )
    return PostedBatch(lot_number=payload.lot_number, quantity=payload.quantity)


def translate_purchase_order(
    document_id: str,
    document: DocumentInput | PurchaseOrderPayload,
) -> PurchaseOrder:
    payload = (
        document
        if isinstance(document, PurchaseOrderPayload)
        else PurchaseOrderPayload.model_validate(document)
    )
    items: list[PurchaseOrderLineItem] = []
    for index, raw_item in enumerate(payload.items):
        try:
            item = PurchaseOrderItemPayload.model_validate(raw_item)
        except ValidationError as exc:
            log.warning(
                "Skipping malformed item %s of purchase order %s: %s",
                index,
                document_id,
                exc.errors(include_url=False),
            )
            continue
        items.append(
            PurchaseOrderLineItem(
                # items saved before line ids existed are addressed by position
                id=item.id or f"{document_id}_{index}",
                name=item.name or "",
                quantity=quantity_or_zero(item.quantity),
                unit=item.unit,
                inventory_item_id=item.inventory_item_id,
                received_quantity=quantity_or_zero(item.received_quantity),
                unit_price=item.unit_price,
            )
        )
    return PurchaseOrder(id=document_id, number=payload.number, items=tuple(items))


def _as_day(value: date | None) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    return value
