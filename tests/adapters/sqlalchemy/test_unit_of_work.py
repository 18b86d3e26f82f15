from __future__ import annotations

import asyncio
import threading
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from goodsreceipt.adapters.sqlalchemy import (
    SqlAlchemyGoodsReceiptStore,
    SqlAlchemyPurchaseOrderStore,
    SqlAlchemyReceivedBatchLedger,
)
from goodsreceipt.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReceiptUnitOfWork,
    StartupError,
    configured_engine,
    create_engine_for_uri,
    is_started,
    shutdown,
    startup,
)
from goodsreceipt.app import reconcile_order
from goodsreceipt.domain.reconciliation import (
    CollectingDiagnosticSink,
    LineStatus,
    ReconciliationEngine,
)
from tests.helpers.receipts import make_line_item, make_order

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_sqlalchemy_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyReceiptUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:")
    engine_b = create_engine("sqlite+pysqlite:///:memory:")

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert is_started()

    shutdown()
    assert not is_started()


def test_in_memory_engines_share_one_connection() -> None:
    engine = create_engine_for_uri("sqlite+pysqlite:///:memory:")

    assert engine.pool.__class__.__name__ == "StaticPool"


def test_in_memory_units_of_work_take_turns(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReceiptUnitOfWork],
) -> None:
    entered = threading.Event()

    def open_second() -> None:
        with sqlite_unit_of_work():
            entered.set()

    worker = threading.Thread(target=open_second)
    with sqlite_unit_of_work():
        worker.start()
        assert not entered.wait(0.2)
    worker.join(timeout=5)

    assert entered.is_set()


def test_file_database_units_of_work_run_side_by_side(tmp_path: Path) -> None:
    startup(database_uri=f"sqlite+pysqlite:///{tmp_path / 'receipts.db'}", force=True)
    entered = threading.Event()

    def open_second() -> None:
        with SqlAlchemyReceiptUnitOfWork():
            entered.set()

    worker = threading.Thread(target=open_second)
    with SqlAlchemyReceiptUnitOfWork():
        worker.start()
        assert entered.wait(5)
    worker.join(timeout=5)


def test_rollback_on_error_discards_writes(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReceiptUnitOfWork],
) -> None:
    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.posted_batches.add(line_item_id="IT1", lot_number="L1", quantity=None)
        raise RuntimeError("boom")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.posted_batches.list_for_line_item("IT1") == []


def test_session_is_released_after_exit(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyReceiptUnitOfWork()

    with uow:
        pass

    with pytest.raises(StartupError):
        _ = uow.repositories


@pytest.mark.parametrize("in_memory", [True, False], ids=["memory", "file"])
def test_stores_reconcile_committed_documents(tmp_path: Path, *, in_memory: bool) -> None:
    target = ":memory:" if in_memory else tmp_path / "receipts.db"
    startup(database_uri=f"sqlite+pysqlite:///{target}", force=True)
    uow_factory = SqlAlchemyReceiptUnitOfWork
    order = make_order(make_line_item("IT1"), make_line_item("IT2", name="Widget B"))
    with uow_factory() as uow:
        uow.repositories.purchase_orders.add(order)
        uow.repositories.unloading_reports.add_document(
            "R1",
            {
                "poNumber": "2024-017",
                "fillDate": "2025-01-05",
                "selectedItems": [
                    {
                        "poItemId": "IT1",
                        "batches": [
                            {"batchNumber": "L1", "unloadedQuantity": "40"},
                            {"batchNumber": "L2", "unloadedQuantity": "60"},
                        ],
                    },
                    {"poItemId": "IT2", "unloadedQuantity": "5"},
                ],
            },
        )
        uow.repositories.posted_batches.add(
            line_item_id="IT1", lot_number="l1", quantity=Decimal(40), order_id="ORD1"
        )
        uow.commit()

    async def scenario() -> object:
        orders = SqlAlchemyPurchaseOrderStore(uow_factory)
        loaded = await orders.get_purchase_order("ORD1")
        assert loaded == order
        return await reconcile_order(
            loaded,
            receipts=SqlAlchemyGoodsReceiptStore(uow_factory),
            ledger=SqlAlchemyReceivedBatchLedger(uow_factory),
            engine=ReconciliationEngine(sink=CollectingDiagnosticSink()),
        )

    outcome = asyncio.run(scenario())

    first = outcome.line("IT1")  # type: ignore[attr-defined]
    second = outcome.line("IT2")  # type: ignore[attr-defined]
    assert first.status is LineStatus.READY
    assert [batch.batch_number for batch in first.result.batches] == ["L2"]
    assert first.result.aggregate_quantity == Decimal(60)
    assert second.status is LineStatus.READY
    assert second.result.aggregate_quantity == Decimal(5)
