"""Pydantic models describing the warehouse document payloads.

The same shapes are read from the document store and from the ``document``
column of the SQL store, so both adapters share these models.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import cast

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from goodsreceipt.domain.model import parse_quantity


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _number_to_text(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float | Decimal):
        return str(value)
    return _blank_to_none(value)


def _none_to_false(value: object) -> object:
    return False if value is None else value


def _none_to_empty(value: object) -> object:
    return [] if value is None else value


def _to_quantity(value: object) -> Decimal | None:
    return parse_quantity(value)


class DocumentBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class BatchPayload(DocumentBaseModel):
    batch_number: str | None = Field(
        default=None,
        validation_alias=AliasChoices("batchNumber", "lotNumber"),
    )
    unloaded_quantity: str | None = Field(
        default=None,
        validation_alias=AliasChoices("unloadedQuantity", "quantity"),
    )
    expiry_date: object = Field(default=None, alias="expiryDate")
    no_expiry_date: bool = Field(default=False, alias="noExpiryDate")

    _normalize_text = field_validator("batch_number", "unloaded_quantity", mode="before")(
        _number_to_text
    )
    _normalize_flag = field_validator("no_expiry_date", mode="before")(_none_to_false)


class SelectedItemPayload(DocumentBaseModel):
    po_item_id: str | None = Field(default=None, alias="poItemId")
    product_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("productName", "name"),
    )
    unloaded_quantity: str | None = Field(default=None, alias="unloadedQuantity")
    expiry_date: object = Field(default=None, alias="expiryDate")
    no_expiry_date: bool = Field(default=False, alias="noExpiryDate")
    batches: list[object] = Field(default_factory=list[object])

    _normalize_text = field_validator(
        "po_item_id", "product_name", "unloaded_quantity", mode="before"
    )(_number_to_text)
    _normalize_flag = field_validator("no_expiry_date", mode="before")(_none_to_false)
    _normalize_batches = field_validator("batches", mode="before")(_none_to_empty)


class UnloadingReportPayload(DocumentBaseModel):
    po_number: str | None = Field(default=None, alias="poNumber")
    fill_date: object = Field(
        default=None,
        validation_alias=AliasChoices("fillDate", "filledAt", "createdAt"),
    )
    selected_items: list[object] = Field(default_factory=list[object], alias="selectedItems")

    _normalize_number = field_validator("po_number", mode="before")(_number_to_text)
    _normalize_items = field_validator("selected_items", mode="before")(_none_to_empty)


class PostedBatchPayload(DocumentBaseModel):
    """An ``inventoryBatches`` document linked to an order line."""

    lot_number: str | None = None
    quantity: Decimal | None = None

    @model_validator(mode="before")
    @classmethod
    def _pick_fields(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        data = cast("Mapping[str, object]", value)
        lot_number = data.get("lotNumber")
        if lot_number is None or (isinstance(lot_number, str) and not lot_number.strip()):
            lot_number = data.get("batchNumber")
        quantity = data.get("initialQuantity")
        if quantity is None:
            quantity = data.get("quantity")
        return {"lot_number": lot_number, "quantity": quantity}

    _normalize_lot = field_validator("lot_number", mode="before")(_number_to_text)
    _normalize_quantity = field_validator("quantity", mode="before")(_to_quantity)


class PurchaseOrderItemPayload(DocumentBaseModel):
    id: str | None = None
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "productName"))
    quantity: Decimal | None = None
    unit: str | None = None
    inventory_item_id: str | None = Field(default=None, alias="inventoryItemId")
    received_quantity: Decimal | None = Field(
        default=None,
        validation_alias=AliasChoices("received", "receivedQuantity"),
    )
    unit_price: Decimal | None = Field(default=None, alias="unitPrice")

    _normalize_text = field_validator("id", "name", "unit", "inventory_item_id", mode="before")(
        _number_to_text
    )
    _normalize_numbers = field_validator(
        "quantity", "received_quantity", "unit_price", mode="before"
    )(_to_quantity)


class PurchaseOrderPayload(DocumentBaseModel):
    number: str | None = None
    items: list[object] = Field(default_factory=list[object])

    _normalize_number = field_validator("number", mode="before")(_number_to_text)
    _normalize_items = field_validator("items", mode="before")(_none_to_empty)


type DocumentInput = Mapping[str, object]
