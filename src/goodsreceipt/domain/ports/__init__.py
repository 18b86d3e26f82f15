"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    PostedBatchRepository,
    PurchaseOrderRepository,
    UnloadingReportRepository,
)
from .stores import GoodsReceiptStore, PurchaseOrderStore, ReceivedBatchLedger
from .unit_of_work import (
    ReceiptRepositories,
    ReceiptUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "GoodsReceiptStore",
    "PostedBatchRepository",
    "PurchaseOrderRepository",
    "PurchaseOrderStore",
    "ReceiptRepositories",
    "ReceiptUnitOfWork",
    "ReceivedBatchLedger",
    "RepositoryCollection",
    "UnitOfWork",
    "UnloadingReportRepository",
]
