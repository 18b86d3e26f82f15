"""Shared payload schemas and translators for warehouse documents."""

from __future__ import annotations

from .schema import (
    BatchPayload,
    DocumentInput,
    PostedBatchPayload,
    PurchaseOrderItemPayload,
    PurchaseOrderPayload,
    SelectedItemPayload,
    UnloadingReportPayload,
)
from .translator import (
    translate_batch,
    translate_posted_batch,
    translate_purchase_order,
    translate_selected_item,
    translate_unloading_report,
)

__all__ = [
    "BatchPayload",
    "DocumentInput",
    "PostedBatchPayload",
    "PurchaseOrderItemPayload",
    "PurchaseOrderPayload",
    "SelectedItemPayload",
    "UnloadingReportPayload",
    "translate_batch",
    "translate_posted_batch",
    "translate_purchase_order",
    "translate_selected_item",
    "translate_unloading_report",
]
