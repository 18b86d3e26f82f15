"""Purchase orders and their line items."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .quantities import ZERO


@dataclass(frozen=True, slots=True, kw_only=True)
class PurchaseOrderLineItem:
    """One ordered product within a purchase order.

    ``received_quantity`` is maintained by the inventory-receiving workflow; this
    package only reads it.
    """

    id: str
    name: str
    quantity: Decimal = ZERO
    unit: str | None = None
    inventory_item_id: str | None = None
    received_quantity: Decimal = ZERO
    unit_price: Decimal | None = None

    @property
    def outstanding_quantity(self) -> Decimal:
        return max(self.quantity - self.received_quantity, ZERO)


@dataclass(frozen=True, slots=True, kw_only=True)
class PurchaseOrder:
    id: str
    number: str | None = None
    items: tuple[PurchaseOrderLineItem, ...] = ()

    def line_item(self, item_id: str) -> PurchaseOrderLineItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None
