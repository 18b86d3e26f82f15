"""SQLAlchemy adapter package for goods-receipt storage."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    inventory_batch_table,
    metadata,
    purchase_order_item_table,
    purchase_order_table,
    unloading_report_table,
)
from .repositories import (
    SqlAlchemyPostedBatchRepository,
    SqlAlchemyPurchaseOrderRepository,
    SqlAlchemyUnloadingReportRepository,
)
from .unit_of_work import (
    SqlAlchemyReceiptUnitOfWork,
    StartupError,
    create_engine_for_uri,
    is_started,
    shutdown,
    startup,
)
from .stores import (  # noqa: I001
    SqlAlchemyGoodsReceiptStore,
    SqlAlchemyPurchaseOrderStore,
    SqlAlchemyReceivedBatchLedger,
)

__all__ = [
    "SqlAlchemyGoodsReceiptStore",
    "SqlAlchemyPostedBatchRepository",
    "SqlAlchemyPurchaseOrderRepository",
    "SqlAlchemyPurchaseOrderStore",
    "SqlAlchemyReceiptUnitOfWork",
    "SqlAlchemyReceivedBatchLedger",
    "SqlAlchemyUnloadingReportRepository",
    "StartupError",
    "create_all_tables",
    "create_engine_for_uri",
    "inventory_batch_table",
    "is_started",
    "metadata",
    "purchase_order_item_table",
    "purchase_order_table",
    "shutdown",
    "startup",
    "unloading_report_table",
]
