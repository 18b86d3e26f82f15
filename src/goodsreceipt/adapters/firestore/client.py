"""HTTP client and store adapters for the Firestore REST API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from goodsreceipt.adapters.documents import (
    translate_posted_batch,
    translate_purchase_order,
    translate_unloading_report,
)
from goodsreceipt.adapters.http_resilience import ResilientClient

from .schema import DocumentPayload, ErrorResponse, RunQueryItem
from .values import encode_value

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterable, Mapping
    from types import TracebackType

    import httpx

    from goodsreceipt.config import FirestoreCollections, FirestoreConfig, ResilienceConfig
    from goodsreceipt.domain.model import PostedBatch, PurchaseOrder, UnloadingReport
    from goodsreceipt.domain.ports import GoodsReceiptStore, PurchaseOrderStore, ReceivedBatchLedger

log = getLogger(__name__)

ORDER_NUMBER_FIELD = "poNumber"
LINE_ITEM_LINK_FIELDS = ("purchaseOrderDetails.itemPoId", "sourceDetails.itemPoId")


class DocumentStoreError(RuntimeError):
    """Raised when the document store returns a payload of an unexpected shape."""


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def equality_filter(filters: Mapping[str, object]) -> dict[str, object]:
    clauses: list[dict[str, object]] = [
        {
            "fieldFilter": {
                "field": {"fieldPath": path},
                "op": "EQUAL",
                "value": encode_value(value),
            }
        }
        for path, value in filters.items()
    ]
    if len(clauses) == 1:
        return clauses[0]
    return {"compositeFilter": {"op": "AND", "filters": clauses}}


@dataclass(slots=True)
class FirestoreClient:
    """Minimal async Firestore REST client; use as ``async with``."""

    config: FirestoreConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _http: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> FirestoreClient:
        self._http = self.client_factory(self.config.resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    @property
    def http(self) -> ResilientClient:
        if self._http is None:
            raise RuntimeError("FirestoreClient must be entered with 'async with' before use")
        return self._http

    async def run_query(
        self,
        *,
        collection_id: str,
        filters: Mapping[str, object],
        parent: str | None = None,
    ) -> list[DocumentPayload]:
        root = self.config.documents_root
        url = f"{root}/{parent.strip('/')}:runQuery" if parent else f"{root}:runQuery"
        body = {
            "structuredQuery": {
                "from": [{"collectionId": collection_id}],
                "where": equality_filter(filters),
            }
        }
        response = await self.http.post(url, json=body)
        payload = self._payload(response)
        if not isinstance(payload, list):
            raise DocumentStoreError("Unexpected runQuery response payload")
        items = [RunQueryItem.model_validate(item) for item in payload]
        return [item.document for item in items if item.document is not None]

    async def get_document(self, path: str) -> DocumentPayload | None:
        response = await self.http.get(f"{self.config.documents_root}/{path.strip('/')}")
        if response.status_code == 404:
            return None
        payload = self._payload(response)
        if not isinstance(payload, dict):
            raise DocumentStoreError(f"Unexpected document payload for {path}")
        return DocumentPayload.model_validate(payload)

    def _payload(self, response: httpx.Response) -> object:
        if response.is_error:
            try:
                error = ErrorResponse.model_validate(response.json())
            except ValueError:
                log.error(f"Firestore request failed with HTTP {response.status_code}")
            else:
                log.error(
                    f"Firestore error {error.error.status or error.error.code}: "
                    f"{error.error.message}"
                )
            response.raise_for_status()
        return response.json()


def _union_by_name(batches: Iterable[list[DocumentPayload]]) -> list[DocumentPayload]:
    seen: dict[str, DocumentPayload] = {}
    for documents in batches:
        for document in documents:
            seen.setdefault(document.name, document)
    return list(seen.values())


@dataclass(slots=True)
class FirestoreGoodsReceiptStore:
    client: FirestoreClient
    collections: FirestoreCollections

    async def query_by_order_number(self, variants: Collection[str]) -> list[UnloadingReport]:
        unique = list(dict.fromkeys(variant for variant in variants if variant))
        if not unique:
            return []
        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(
                    self.client.run_query(
                        parent=self.collections.unloading_reports_parent,
                        collection_id=self.collections.unloading_reports,
                        filters={ORDER_NUMBER_FIELD: variant},
                    )
                )
                for variant in unique
            ]
        documents = _union_by_name(task.result() for task in tasks)

        reports: list[UnloadingReport] = []
        for document in documents:
            try:
                reports.append(translate_unloading_report(document.id, document.decoded()))
            except (TypeError, ValueError):
                log.exception(f"Skipping unreadable unloading report {document.id}")
        log.debug(
            f"Loaded {len(reports)} unloading reports for order number variants {unique}"
        )
        return reports


@dataclass(slots=True)
class FirestoreReceivedBatchLedger:
    """Reads ``inventoryBatches`` linked to a line under either historical schema."""

    client: FirestoreClient
    collections: FirestoreCollections

    async def list_posted_batches(self, line_item_id: str) -> list[PostedBatch]:
        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(
                    self.client.run_query(
                        collection_id=self.collections.inventory_batches,
                        filters={link_field: line_item_id},
                    )
                )
                for link_field in LINE_ITEM_LINK_FIELDS
            ]
        documents = _union_by_name(task.result() for task in tasks)

        posted: list[PostedBatch] = []
        for document in documents:
            try:
                posted.append(translate_posted_batch(document.decoded()))
            except (TypeError, ValueError):
                log.exception(f"Skipping unreadable inventory batch {document.id}")
        return posted


@dataclass(slots=True)
class FirestorePurchaseOrderStore:
    client: FirestoreClient
    collections: FirestoreCollections

    async def get_purchase_order(self, order_id: str) -> PurchaseOrder | None:
        document = await self.client.get_document(f"{self.collections.purchase_orders}/{order_id}")
        if document is None:
            return None
        return translate_purchase_order(document.id, document.decoded())


if TYPE_CHECKING:
    _receipts_check: type[GoodsReceiptStore] = FirestoreGoodsReceiptStore
    _ledger_check: type[ReceivedBatchLedger] = FirestoreReceivedBatchLedger
    _orders_check: type[PurchaseOrderStore] = FirestorePurchaseOrderStore
