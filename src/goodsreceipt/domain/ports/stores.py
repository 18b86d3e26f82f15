"""Read ports for the document stores feeding reconciliation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection

    from goodsreceipt.domain.model import PostedBatch, PurchaseOrder, UnloadingReport


@runtime_checkable
class GoodsReceiptStore(Protocol):
    """Unloading reports, looked up by order-number spellings."""

    async def query_by_order_number(self, variants: Collection[str]) -> list[UnloadingReport]:
        """Return reports whose order number equals any variant, without duplicates."""
        ...


@runtime_checkable
class ReceivedBatchLedger(Protocol):
    """Batches already posted to inventory."""

    async def list_posted_batches(self, line_item_id: str) -> list[PostedBatch]: ...


@runtime_checkable
class PurchaseOrderStore(Protocol):
    async def get_purchase_order(self, order_id: str) -> PurchaseOrder | None: ...


__all__ = ["GoodsReceiptStore", "PurchaseOrderStore", "ReceivedBatchLedger"]
