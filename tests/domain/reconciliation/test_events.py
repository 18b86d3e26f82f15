from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from goodsreceipt.domain.reconciliation import (
    CollectingDiagnosticSink,
    DiagnosticEvent,
    IssueKind,
    LoggingDiagnosticSink,
    Severity,
)

if TYPE_CHECKING:
    import pytest


def _event(severity: Severity = Severity.WARNING, **context: object) -> DiagnosticEvent:
    return DiagnosticEvent(
        stage="batch_aggregator",
        severity=severity,
        code=IssueKind.MALFORMED_DATE,
        message="Treating unparseable expiry date as missing",
        context=context,
    )


def test_logging_sink_uses_stage_logger_and_level(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="goodsreceipt.reconciliation")

    LoggingDiagnosticSink()(_event(line_item_id="IT1", raw="31/02"))

    record = caplog.records[-1]
    assert record.name == "goodsreceipt.reconciliation.batch_aggregator"
    assert record.levelno == logging.WARNING
    assert record.getMessage() == (
        "Treating unparseable expiry date as missing (line_item_id=IT1 raw=31/02)"
    )


def test_logging_sink_skips_disabled_levels(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="goodsreceipt.reconciliation")

    LoggingDiagnosticSink()(_event(Severity.DEBUG))

    assert not [r for r in caplog.records if r.name.startswith("goodsreceipt.reconciliation")]


def test_collecting_sink_filters_by_code_and_forwards() -> None:
    downstream = CollectingDiagnosticSink()
    sink = CollectingDiagnosticSink(forward=downstream)
    other = DiagnosticEvent(stage="item_matcher", severity=Severity.DEBUG, message="matched")

    sink(_event())
    sink(other)

    assert sink.with_code(IssueKind.MALFORMED_DATE) == [_event()]
    assert downstream.events == [_event(), other]
