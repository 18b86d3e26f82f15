"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from goodsreceipt.adapters.firestore import (
    FirestoreClient,
    FirestoreGoodsReceiptStore,
    FirestorePurchaseOrderStore,
    FirestoreReceivedBatchLedger,
)
from goodsreceipt.adapters.sqlalchemy import (
    SqlAlchemyGoodsReceiptStore,
    SqlAlchemyPurchaseOrderStore,
    SqlAlchemyReceivedBatchLedger,
    create_all_tables,
    is_started,
    startup,
)
from goodsreceipt.adapters.sqlalchemy.unit_of_work import configured_engine
from goodsreceipt.config import (
    Backend,
    ReconciliationConfig,
    get_firestore_config,
    get_reconciliation_config,
)
from goodsreceipt.domain.order_numbers import order_number_variants
from goodsreceipt.domain.reconciliation import (
    LineReconciliation,
    LineStatus,
    MissingOrderNumber,
    ReconciliationEngine,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Coroutine
    from types import TracebackType

    from goodsreceipt.domain.model import PurchaseOrder, PurchaseOrderLineItem
    from goodsreceipt.domain.ports import GoodsReceiptStore, PurchaseOrderStore, ReceivedBatchLedger


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Stores:
    receipts: GoodsReceiptStore
    ledger: ReceivedBatchLedger
    orders: PurchaseOrderStore


@dataclass(frozen=True, slots=True)
class OrderReconciliation:
    order: PurchaseOrder
    lines: tuple[LineReconciliation, ...]

    @property
    def receivable(self) -> tuple[LineReconciliation, ...]:
        return tuple(line for line in self.lines if line.status is LineStatus.READY)

    def line(self, line_item_id: str) -> LineReconciliation | None:
        for line in self.lines:
            if line.line_item.id == line_item_id:
                return line
        return None


def lookup_variants(order: PurchaseOrder, config: ReconciliationConfig) -> tuple[str, ...]:
    return order_number_variants(
        order.number,
        order_id=order.id if config.include_order_id_variant else None,
        prefix=config.order_number_prefix,
    )


@asynccontextmanager
async def open_stores(backend: Backend | None = None) -> AsyncIterator[Stores]:
    """Yield the read ports for ``backend``, releasing their resources on exit."""

    effective = backend or get_reconciliation_config().backend
    if effective is Backend.FIRESTORE:
        firestore = get_firestore_config()
        async with FirestoreClient(firestore) as client:
            yield Stores(
                receipts=FirestoreGoodsReceiptStore(client, firestore.collections),
                ledger=FirestoreReceivedBatchLedger(client, firestore.collections),
                orders=FirestorePurchaseOrderStore(client, firestore.collections),
            )
        return

    if not is_started():
        startup()
    yield Stores(
        receipts=SqlAlchemyGoodsReceiptStore(),
        ledger=SqlAlchemyReceivedBatchLedger(),
        orders=SqlAlchemyPurchaseOrderStore(),
    )


async def reconcile_line_item(
    order: PurchaseOrder,
    line_item: PurchaseOrderLineItem,
    *,
    receipts: GoodsReceiptStore,
    ledger: ReceivedBatchLedger,
    engine: ReconciliationEngine | None = None,
    config: ReconciliationConfig | None = None,
) -> LineReconciliation | MissingOrderNumber:
    """Fetch reports and posted batches concurrently, then reconcile one line."""

    variants = lookup_variants(order, config or ReconciliationConfig())
    if not variants:
        return MissingOrderNumber(order_id=order.id)

    async with asyncio.TaskGroup() as group:
        reports_task = group.create_task(receipts.query_by_order_number(variants))
        posted_task = group.create_task(ledger.list_posted_batches(line_item.id))

    return (engine or ReconciliationEngine()).reconcile(
        order,
        line_item,
        reports_task.result(),
        posted_task.result(),
    )


async def reconcile_order(
    order: PurchaseOrder,
    *,
    receipts: GoodsReceiptStore,
    ledger: ReceivedBatchLedger,
    engine: ReconciliationEngine | None = None,
    config: ReconciliationConfig | None = None,
) -> OrderReconciliation | MissingOrderNumber:
    """Reconcile every line of ``order`` with a single report lookup."""

    variants = lookup_variants(order, config or ReconciliationConfig())
    if not variants:
        log.warning(f"Purchase order {order.id} has no order number; skipping reconciliation")
        return MissingOrderNumber(order_id=order.id)

    async with asyncio.TaskGroup() as group:
        reports_task = group.create_task(receipts.query_by_order_number(variants))
        posted_tasks = [
            group.create_task(ledger.list_posted_batches(item.id)) for item in order.items
        ]

    effective_engine = engine or ReconciliationEngine()
    reports = reports_task.result()
    lines = tuple(
        effective_engine.reconcile(order, item, reports, task.result())
        for item, task in zip(order.items, posted_tasks, strict=True)
    )
    log.info(
        f"Reconciled order {order.id}: lines={len(lines)}, reports={len(reports)}, "
        f"variants={list(variants)}"
    )
    return OrderReconciliation(order=order, lines=lines)


class ReconciliationScope:
    """Owns the reconciliations started for one caller context.

    Once closed, pending work is cancelled and any result that still arrives is
    dropped instead of being delivered to a context that no longer exists.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[object]] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def run[T](self, coro: Coroutine[object, object, T]) -> T | None:
        if self._closed:
            coro.close()
            return None
        task: asyncio.Task[T] = asyncio.create_task(coro)
        self._tasks.add(task)  # pyright: ignore[reportArgumentType]
        try:
            result = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if self._closed and (current is None or not current.cancelling()):
                return None
            raise
        finally:
            self._tasks.discard(task)  # pyright: ignore[reportArgumentType]
        if self._closed:
            log.debug("Discarding reconciliation result completed after scope closed")
            return None
        return result

    def close(self) -> None:
        self._closed = True
        for task in list(self._tasks):
            task.cancel()

    async def __aenter__(self) -> ReconciliationScope:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


async def reconcile_purchase_order(
    order_id: str,
    *,
    line_item_id: str | None = None,
    backend: Backend | None = None,
    config: ReconciliationConfig | None = None,
) -> OrderReconciliation | MissingOrderNumber:
    """Load ``order_id`` from the configured backend and reconcile it."""

    effective_config = config or get_reconciliation_config()
    async with open_stores(backend or effective_config.backend) as stores:
        order = await stores.orders.get_purchase_order(order_id)
        if order is None:
            raise LookupError(f"Purchase order {order_id} not found")

        if line_item_id is None:
            return await reconcile_order(
                order,
                receipts=stores.receipts,
                ledger=stores.ledger,
                config=effective_config,
            )

        line_item = order.line_item(line_item_id)
        if line_item is None:
            raise LookupError(f"Purchase order {order_id} has no line item {line_item_id}")
        outcome = await reconcile_line_item(
            order,
            line_item,
            receipts=stores.receipts,
            ledger=stores.ledger,
            config=effective_config,
        )
        if isinstance(outcome, MissingOrderNumber):
            return outcome
        return OrderReconciliation(order=order, lines=(outcome,))


def initialise_database(*, database_uri: str | None = None) -> None:
    """Create the SQLAlchemy schema, starting the adapter if needed."""

    if is_started():
        engine = configured_engine()
        if engine is not None:
            create_all_tables(engine)
        return
    startup(database_uri=database_uri)
    log.info("Database schema ready")
