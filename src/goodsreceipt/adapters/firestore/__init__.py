"""Public interface for the Firestore REST adapter."""

from __future__ import annotations

from .client import (
    DocumentStoreError,
    FirestoreClient,
    FirestoreGoodsReceiptStore,
    FirestorePurchaseOrderStore,
    FirestoreReceivedBatchLedger,
    equality_filter,
)
from .schema import DocumentPayload, RunQueryItem
from .values import ValueDecodeError, decode_fields, decode_value, encode_value

__all__ = [
    "DocumentPayload",
    "DocumentStoreError",
    "FirestoreClient",
    "FirestoreGoodsReceiptStore",
    "FirestorePurchaseOrderStore",
    "FirestoreReceivedBatchLedger",
    "RunQueryItem",
    "ValueDecodeError",
    "decode_fields",
    "decode_value",
    "encode_value",
    "equality_filter",
]
