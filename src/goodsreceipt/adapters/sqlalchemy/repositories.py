"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import json
import logging
from datetime import UTC, date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select

from goodsreceipt.adapters.documents import UnloadingReportPayload, translate_unloading_report
from goodsreceipt.adapters.sqlalchemy.mappings import (
    inventory_batch_table,
    purchase_order_item_table,
    purchase_order_table,
    unloading_report_table,
)
from goodsreceipt.domain.model import PostedBatch, PurchaseOrder, PurchaseOrderLineItem, parse_date

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping

    from sqlalchemy.orm import Session

    from goodsreceipt.domain.model import UnloadingReport
    from goodsreceipt.domain.ports import (
        PostedBatchRepository,
        PurchaseOrderRepository,
        UnloadingReportRepository,
    )

log = logging.getLogger(__name__)


def _json_default(value: object) -> object:
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _as_datetime(value: date | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min, tzinfo=UTC)


class SqlAlchemyUnloadingReportRepository:
    """Unloading reports keep their selected items as the submitted JSON document."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add_document(self, document_id: str, document: Mapping[str, object]) -> None:
        payload = UnloadingReportPayload.model_validate(document)
        items = json.loads(json.dumps(payload.selected_items, default=_json_default))
        table = unloading_report_table
        self.session.execute(delete(table).where(table.c.id == document_id))
        self.session.execute(
            insert(table).values(
                id=document_id,
                po_number=payload.po_number,
                filled_at=_as_datetime(parse_date(payload.fill_date)),
                selected_items=items,
            )
        )

    def find_by_order_numbers(self, variants: Collection[str]) -> list[UnloadingReport]:
        wanted = [variant for variant in variants if variant]
        if not wanted:
            return []
        table = unloading_report_table
        stmt = (
            select(table)
            .where(table.c.po_number.in_(wanted))
            .order_by(table.c.filled_at.is_(None), table.c.filled_at, table.c.id)
        )
        reports: list[UnloadingReport] = []
        for row in self.session.execute(stmt).mappings():
            document = {
                "poNumber": row["po_number"],
                "fillDate": row["filled_at"],
                "selectedItems": row["selected_items"],
            }
            try:
                reports.append(translate_unloading_report(row["id"], document))
            except (TypeError, ValueError):
                log.exception("Skipping unreadable unloading report %s", row["id"])
        return reports


class SqlAlchemyPostedBatchRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(
        self,
        *,
        line_item_id: str,
        lot_number: str | None,
        quantity: Decimal | None,
        order_id: str | None = None,
    ) -> None:
        self.session.execute(
            insert(inventory_batch_table).values(
                line_item_id=line_item_id,
                order_id=order_id,
                lot_number=lot_number,
                quantity=quantity,
            )
        )

    def list_for_line_item(self, line_item_id: str) -> list[PostedBatch]:
        table = inventory_batch_table
        stmt = (
            select(table.c.lot_number, table.c.quantity)
            .where(table.c.line_item_id == line_item_id)
            .order_by(table.c.id)
        )
        return [
            PostedBatch(lot_number=row.lot_number, quantity=row.quantity)
            for row in self.session.execute(stmt)
        ]


class SqlAlchemyPurchaseOrderRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, order: PurchaseOrder) -> None:
        self.session.execute(insert(purchase_order_table).values(id=order.id, number=order.number))
        if not order.items:
            return
        self.session.execute(
            insert(purchase_order_item_table),
            [
                {
                    "order_id": order.id,
                    "item_id": item.id,
                    "position": position,
                    "name": item.name,
                    "quantity": item.quantity,
                    "unit": item.unit,
                    "inventory_item_id": item.inventory_item_id,
                    "received_quantity": item.received_quantity,
                    "unit_price": item.unit_price,
                }
                for position, item in enumerate(order.items)
            ],
        )

    def get(self, order_id: str) -> PurchaseOrder | None:
        order_row = self.session.execute(
            select(purchase_order_table).where(purchase_order_table.c.id == order_id)
        ).first()
        if order_row is None:
            return None
        items_table = purchase_order_item_table
        item_rows = self.session.execute(
            select(items_table)
            .where(items_table.c.order_id == order_id)
            .order_by(items_table.c.position)
        )
        items = tuple(
            PurchaseOrderLineItem(
                id=row.item_id,
                name=row.name,
                quantity=row.quantity,
                unit=row.unit,
                inventory_item_id=row.inventory_item_id,
                received_quantity=row.received_quantity,
                unit_price=row.unit_price,
            )
            for row in item_rows
        )
        return PurchaseOrder(id=order_row.id, number=order_row.number, items=items)


if TYPE_CHECKING:
    _reports_check: type[UnloadingReportRepository] = SqlAlchemyUnloadingReportRepository
    _batches_check: type[PostedBatchRepository] = SqlAlchemyPostedBatchRepository
    _orders_check: type[PurchaseOrderRepository] = SqlAlchemyPurchaseOrderRepository
