"""Ports for persisting warehouse documents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping
    from decimal import Decimal

    from goodsreceipt.domain.model import PostedBatch, PurchaseOrder, UnloadingReport


@runtime_checkable
class UnloadingReportRepository(Protocol):
    """Persistence contract for unloading reports (stored as raw documents)."""

    def add_document(self, document_id: str, document: Mapping[str, object]) -> None: ...

    def find_by_order_numbers(self, variants: Collection[str]) -> list[UnloadingReport]: ...


@runtime_checkable
class PostedBatchRepository(Protocol):
    """Persistence contract for the received-batch ledger."""

    def add(
        self,
        *,
        line_item_id: str,
        lot_number: str | None,
        quantity: Decimal | None,
        order_id: str | None = None,
    ) -> None: ...

    def list_for_line_item(self, line_item_id: str) -> list[PostedBatch]: ...


@runtime_checkable
class PurchaseOrderRepository(Protocol):
    def add(self, order: PurchaseOrder) -> None: ...

    def get(self, order_id: str) -> PurchaseOrder | None: ...
