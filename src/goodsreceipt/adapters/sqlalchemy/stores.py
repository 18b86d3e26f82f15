"""Async read ports over the synchronous SQLAlchemy repositories.

Each read opens its own unit of work on a worker thread, so concurrent reads
never share a session. Against in-memory SQLite the units of work take turns on
the single shared connection.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from goodsreceipt.adapters.sqlalchemy.unit_of_work import SqlAlchemyReceiptUnitOfWork
from goodsreceipt.domain.ports.unit_of_work import ReceiptUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Collection

    from goodsreceipt.domain.model import PostedBatch, PurchaseOrder, UnloadingReport
    from goodsreceipt.domain.ports import GoodsReceiptStore, PurchaseOrderStore, ReceivedBatchLedger

UnitOfWorkFactory = Callable[[], ReceiptUnitOfWork]


@dataclass(slots=True)
class SqlAlchemyGoodsReceiptStore:
    unit_of_work_factory: UnitOfWorkFactory = SqlAlchemyReceiptUnitOfWork

    async def query_by_order_number(self, variants: Collection[str]) -> list[UnloadingReport]:
        return await asyncio.to_thread(self._query, list(variants))

    def _query(self, variants: list[str]) -> list[UnloadingReport]:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.unloading_reports.find_by_order_numbers(variants)


@dataclass(slots=True)
class SqlAlchemyReceivedBatchLedger:
    unit_of_work_factory: UnitOfWorkFactory = SqlAlchemyReceiptUnitOfWork

    async def list_posted_batches(self, line_item_id: str) -> list[PostedBatch]:
        return await asyncio.to_thread(self._list, line_item_id)

    def _list(self, line_item_id: str) -> list[PostedBatch]:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.posted_batches.list_for_line_item(line_item_id)


@dataclass(slots=True)
class SqlAlchemyPurchaseOrderStore:
    unit_of_work_factory: UnitOfWorkFactory = SqlAlchemyReceiptUnitOfWork

    async def get_purchase_order(self, order_id: str) -> PurchaseOrder | None:
        return await asyncio.to_thread(self._get, order_id)

    def _get(self, order_id: str) -> PurchaseOrder | None:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.purchase_orders.get(order_id)


if TYPE_CHECKING:
    _receipts_check: type[GoodsReceiptStore] = SqlAlchemyGoodsReceiptStore
    _ledger_check: type[ReceivedBatchLedger] = SqlAlchemyReceivedBatchLedger
    _orders_check: type[PurchaseOrderStore] = SqlAlchemyPurchaseOrderStore
