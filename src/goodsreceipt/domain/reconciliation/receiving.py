"""Build the parameter set handed to the inventory-receiving workflow."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from goodsreceipt.domain.model import KnownDate, NotApplicable, parse_quantity

from .contracts import ItemNotReported

if TYPE_CHECKING:
    from decimal import Decimal

    from goodsreceipt.domain.model import (
        BatchEntry,
        DateValue,
        PurchaseOrder,
        PurchaseOrderLineItem,
    )

    from .contracts import MatchDiagnosis, ReconciliationResult


type ExpiryPayload = dict[str, object]


class BuildReceivingRequest(Protocol):
    def __call__(
        self,
        line_item: PurchaseOrderLineItem,
        result: ReconciliationResult,
        order: PurchaseOrder,
        *,
        diagnosis: MatchDiagnosis,
    ) -> ReceivingRequest | ItemNotReported: ...


@dataclass(frozen=True, slots=True, kw_only=True)
class ReceivingBatch:
    batch_number: str | None
    quantity: Decimal | None
    expiry: DateValue

    @classmethod
    def from_entry(cls, entry: BatchEntry) -> ReceivingBatch:
        return cls(
            batch_number=entry.batch_number,
            quantity=parse_quantity(entry.unloaded_quantity),
            expiry=entry.expiry,
        )

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"batchNumber": self.batch_number or ""}
        if self.quantity is not None:
            payload["quantity"] = _json_number(self.quantity)
        payload.update(expiry_fields(self.expiry))
        return payload


@dataclass(frozen=True, slots=True, kw_only=True)
class ReceivingRequest:
    """Everything the receiving workflow needs to post one order line."""

    order_id: str
    order_number: str | None
    line_item_id: str
    line_item_name: str
    inventory_item_id: str | None
    unit_price: Decimal | None
    quantity: Decimal
    batches: tuple[ReceivingBatch, ...]
    expiry: DateValue

    @property
    def uses_batch_list(self) -> bool:
        return bool(self.batches)

    def to_parameters(self) -> dict[str, str]:
        """Flatten into string parameters.

        Lines with reported lots carry them as a JSON array under ``batches``.
        Lines known only from legacy entries emit the single ``expiryDate`` or
        ``noExpiryDate`` field older consumers expect instead. A lot without a
        parseable quantity is sent without one.
        """

        params = {
            "orderNumber": self.order_number or "",
            "orderId": self.order_id,
            "lineItemId": self.line_item_id,
            "lineItemName": self.line_item_name,
            "quantity": format_decimal(self.quantity),
        }
        if self.inventory_item_id:
            params["inventoryItemId"] = self.inventory_item_id
        if self.unit_price is not None:
            params["unitPrice"] = format_decimal(self.unit_price)

        if self.uses_batch_list:
            params["batches"] = json.dumps([batch.to_payload() for batch in self.batches])
            return params

        if isinstance(self.expiry, NotApplicable):
            params["noExpiryDate"] = "true"
        elif isinstance(self.expiry, KnownDate):
            params["expiryDate"] = expiry_day(self.expiry)
        return params


def build_receiving_request(
    line_item: PurchaseOrderLineItem,
    result: ReconciliationResult,
    order: PurchaseOrder,
    *,
    diagnosis: MatchDiagnosis,
) -> ReceivingRequest | ItemNotReported:
    if not result.matched:
        return ItemNotReported(
            line_item_id=line_item.id,
            line_item_name=line_item.name,
            diagnosis=diagnosis,
        )
    # legacy-only lines keep the single expiry fields
    batches = () if all(batch.synthesized for batch in result.batches) else result.batches
    return ReceivingRequest(
        order_id=order.id,
        order_number=order.number,
        line_item_id=line_item.id,
        line_item_name=line_item.name,
        inventory_item_id=line_item.inventory_item_id,
        unit_price=line_item.unit_price,
        quantity=result.aggregate_quantity,
        batches=tuple(ReceivingBatch.from_entry(batch) for batch in batches),
        expiry=result.representative_expiry,
    )


def expiry_fields(expiry: DateValue) -> ExpiryPayload:
    if isinstance(expiry, NotApplicable):
        return {"noExpiryDate": True}
    if isinstance(expiry, KnownDate):
        return {"expiryDate": expiry_day(expiry)}
    return {"expiryDate": None}


def expiry_day(expiry: KnownDate) -> str:
    value = expiry.value
    if isinstance(value, datetime):
        return value.date().isoformat()
    return value.isoformat()


def format_decimal(value: Decimal) -> str:
    text = format(value.normalize(), "f")
    return "0" if text in {"-0", ""} else text


def _json_number(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)
