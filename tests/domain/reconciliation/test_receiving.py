from __future__ import annotations

import json
from decimal import Decimal

from goodsreceipt.domain.model import NO_DATE, ZERO
from goodsreceipt.domain.reconciliation import (
    CollectingDiagnosticSink,
    ItemNotReported,
    MatchType,
    ReceivingRequest,
    ReconciliationResult,
    aggregate,
    build_receiving_request,
    classify,
    match_entries,
)
from tests.helpers.receipts import (
    batch_list,
    legacy,
    make_batch,
    make_line_item,
    make_order,
    make_report,
    posted,
)


def _build(line_item, reports, posted_batches):  # noqa: ANN001, ANN202
    sink = CollectingDiagnosticSink()
    order = make_order(line_item)
    result = aggregate(
        line_item, match_entries(line_item, reports, emit=sink), posted_batches, emit=sink
    )
    return build_receiving_request(
        line_item, result, order, diagnosis=classify(line_item, reports)
    )


def test_unmatched_line_yields_item_not_reported_with_match_type() -> None:
    line_item = make_line_item("IT1", name="Widget A")
    reports = [make_report("R2", legacy(None, "3", product_name="Widget A"))]

    outcome = _build(line_item, reports, [])

    assert isinstance(outcome, ItemNotReported)
    assert outcome.match_type is MatchType.BY_NAME_ONLY
    assert outcome.message.startswith("[by_name_only]")
    assert outcome.line_item_id == "IT1"


def test_batch_list_is_serialized_as_json() -> None:
    line_item = make_line_item("IT1", unit_price="2.50")
    reports = [
        make_report(
            "R1",
            batch_list(
                "IT1",
                make_batch("L1", "40", "2025-01-01"),
                make_batch("L2", "60,5", no_expiry=True),
                make_batch("L3", "1"),
            ),
        )
    ]

    outcome = _build(line_item, reports, posted("l1"))

    assert isinstance(outcome, ReceivingRequest)
    params = outcome.to_parameters()
    assert params["orderNumber"] == "PO-2024-017"
    assert params["orderId"] == "ORD1"
    assert params["lineItemId"] == "IT1"
    assert params["lineItemName"] == "Widget A"
    assert params["unitPrice"] == "2.5"
    assert params["quantity"] == "61.5"
    assert "expiryDate" not in params
    assert json.loads(params["batches"]) == [
        {"batchNumber": "L2", "quantity": 60.5, "noExpiryDate": True},
        {"batchNumber": "L3", "quantity": 1, "expiryDate": None},
    ]


def test_unit_price_comes_from_order_line() -> None:
    line_item = make_line_item("IT1", unit_price="9.99")

    outcome = _build(line_item, [make_report("R1", legacy("IT1", "2", "2025-05-05"))], [])

    assert isinstance(outcome, ReceivingRequest)
    assert outcome.unit_price == Decimal("9.99")


def test_legacy_only_line_uses_single_expiry_date() -> None:
    line_item = make_line_item("IT1")

    outcome = _build(line_item, [make_report("R1", legacy("IT1", "12", "2025-03-01"))], [])

    assert isinstance(outcome, ReceivingRequest)
    assert outcome.batches == ()
    params = outcome.to_parameters()
    assert "batches" not in params
    assert "noExpiryDate" not in params
    assert params["expiryDate"] == "2025-03-01"
    assert params["quantity"] == "12"


def test_legacy_only_line_declares_no_expiry_date() -> None:
    line_item = make_line_item("IT1")
    reports = [
        make_report("R1", legacy("IT1", "5", no_expiry=True)),
        make_report("R2", legacy("IT1", "3", no_expiry=True)),
    ]

    outcome = _build(line_item, reports, [])

    assert isinstance(outcome, ReceivingRequest)
    params = outcome.to_parameters()
    assert "batches" not in params
    assert "expiryDate" not in params
    assert params["noExpiryDate"] == "true"
    assert params["quantity"] == "8"


def test_legacy_lot_joins_batch_list_when_reports_mix_shapes() -> None:
    line_item = make_line_item("IT1")
    reports = [
        make_report("R1", legacy("IT1", "4", "2025-02-01")),
        make_report("R2", batch_list("IT1", make_batch("L9", "6", "2025-04-01"))),
    ]

    outcome = _build(line_item, reports, [])

    assert isinstance(outcome, ReceivingRequest)
    params = outcome.to_parameters()
    assert "expiryDate" not in params
    assert json.loads(params["batches"]) == [
        {"batchNumber": "", "quantity": 4, "expiryDate": "2025-02-01"},
        {"batchNumber": "L9", "quantity": 6, "expiryDate": "2025-04-01"},
    ]
    assert params["quantity"] == "10"


def test_lot_without_quantity_is_sent_without_one() -> None:
    line_item = make_line_item("IT1", quantity="25")
    reports = [make_report("R1", batch_list("IT1", make_batch("L1", None, "2025-06-01")))]

    outcome = _build(line_item, reports, [])

    assert isinstance(outcome, ReceivingRequest)
    params = outcome.to_parameters()
    assert params["quantity"] == "25"
    assert json.loads(params["batches"]) == [{"batchNumber": "L1", "expiryDate": "2025-06-01"}]


def test_single_expiry_fields_omit_unknown_dates() -> None:
    line_item = make_line_item("IT1", unit_price=None, inventory_item_id=None)
    order = make_order(line_item, number=None)
    result = ReconciliationResult(
        matched=True,
        batches=(),
        aggregate_quantity=ZERO,
        representative_expiry=NO_DATE,
        reports_count=0,
    )

    outcome = build_receiving_request(
        line_item, result, order, diagnosis=classify(line_item, [])
    )

    assert isinstance(outcome, ReceivingRequest)
    assert outcome.to_parameters() == {
        "orderNumber": "",
        "orderId": "ORD1",
        "lineItemId": "IT1",
        "lineItemName": "Widget A",
        "quantity": "0",
    }
