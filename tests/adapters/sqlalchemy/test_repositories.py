"""Tests for SQLAlchemy repositories."""

from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.orm import Session

from goodsreceipt.adapters.sqlalchemy.repositories import (
    SqlAlchemyPostedBatchRepository,
    SqlAlchemyPurchaseOrderRepository,
    SqlAlchemyUnloadingReportRepository,
)
from goodsreceipt.domain.model import NOT_APPLICABLE, BatchListEntry, KnownDate, LegacyEntry
from tests.helpers.receipts import make_line_item, make_order

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    with Session(sqlite_engine) as session:
        yield session


def _report(po_number: str, fill_date: object, *items: dict[str, object]) -> dict[str, object]:
    return {"poNumber": po_number, "fillDate": fill_date, "selectedItems": list(items)}


def test_reports_are_found_by_any_variant_in_fill_order(sqlite_session: Session) -> None:
    repository = SqlAlchemyUnloadingReportRepository(sqlite_session)
    item = {"poItemId": "IT1", "unloadedQuantity": "5"}
    repository.add_document("R-b", _report("2024-017", "2025-01-06", item))
    repository.add_document("R-c", _report("PO-2024-017", None, item))
    repository.add_document("R-a", _report("PO-2024-017", "2025-01-05T08:30:00Z", item))
    repository.add_document("R-x", _report("PO-2024-999", "2025-01-01", item))
    sqlite_session.commit()

    reports = repository.find_by_order_numbers(["PO-2024-017", "2024-017", ""])

    assert [report.id for report in reports] == ["R-a", "R-b", "R-c"]
    assert reports[0].filled_at == date(2025, 1, 5)
    assert reports[1].order_number_variants == frozenset({"2024-017"})
    assert reports[2].filled_at is None


def test_report_documents_keep_entry_shapes(sqlite_session: Session) -> None:
    repository = SqlAlchemyUnloadingReportRepository(sqlite_session)
    repository.add_document(
        "R1",
        _report(
            "PO-7",
            datetime(2025, 1, 5, tzinfo=UTC),
            {
                "poItemId": "IT1",
                "batches": [
                    {"batchNumber": "L1", "unloadedQuantity": 4, "expiryDate": date(2025, 9, 1)}
                ],
            },
            {"poItemId": "IT2", "unloadedQuantity": "3", "noExpiryDate": True},
        ),
    )
    sqlite_session.commit()

    (report,) = repository.find_by_order_numbers(["PO-7"])

    first, second = report.selected_items
    assert isinstance(first, BatchListEntry)
    assert first.batches[0].expiry == KnownDate(date(2025, 9, 1))
    assert first.batches[0].unloaded_quantity == "4"
    assert isinstance(second, LegacyEntry)
    assert second.expiry is NOT_APPLICABLE


def test_resubmitted_report_replaces_previous_version(sqlite_session: Session) -> None:
    repository = SqlAlchemyUnloadingReportRepository(sqlite_session)
    repository.add_document("R1", _report("PO-7", None, {"poItemId": "IT1"}))
    repository.add_document("R1", _report("PO-7", None, {"poItemId": "IT2"}))
    sqlite_session.commit()

    (report,) = repository.find_by_order_numbers(["PO-7"])

    assert [entry.po_item_id for entry in report.selected_items] == ["IT2"]


def test_empty_variant_list_returns_nothing(sqlite_session: Session) -> None:
    assert SqlAlchemyUnloadingReportRepository(sqlite_session).find_by_order_numbers([]) == []


def test_posted_batches_are_listed_per_line(sqlite_session: Session) -> None:
    repository = SqlAlchemyPostedBatchRepository(sqlite_session)
    repository.add(line_item_id="IT1", lot_number="L1", quantity=Decimal("40.5"), order_id="ORD1")
    repository.add(line_item_id="IT1", lot_number=None, quantity=None)
    repository.add(line_item_id="IT2", lot_number="L9", quantity=Decimal(1))
    sqlite_session.commit()

    batches = repository.list_for_line_item("IT1")

    assert [(batch.lot_number, batch.quantity) for batch in batches] == [
        ("L1", Decimal("40.5")),
        (None, None),
    ]
    assert repository.list_for_line_item("missing") == []


def test_purchase_order_round_trip_keeps_item_order(sqlite_session: Session) -> None:
    repository = SqlAlchemyPurchaseOrderRepository(sqlite_session)
    order = make_order(
        make_line_item("IT2", name="Bolt", unit_price=None, inventory_item_id=None),
        make_line_item("IT1", quantity="12.5"),
    )
    repository.add(order)
    sqlite_session.commit()

    loaded = repository.get("ORD1")

    assert loaded == order
    assert repository.get("ORD404") is None
