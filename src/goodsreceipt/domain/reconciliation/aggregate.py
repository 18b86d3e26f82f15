"""Merge matched report entries into the set of batches still to be posted.

Processing order is the order reports were returned by the store, then the order
of batches inside each entry. That order is observable: the representative expiry
is the first valid date met along it, not the earliest calendar date.

A batch is dropped when its trimmed, lower-cased batch number equals the lot
number of a batch already posted for the line. Batches without a number, and the
single pseudo-batch synthesized for legacy entries, have nothing to compare and
are always kept.
"""

from __future__ import annotations

from dataclasses import replace
from functools import singledispatch
from typing import TYPE_CHECKING, Protocol

from goodsreceipt.domain.model import (
    NO_DATE,
    NOT_APPLICABLE,
    ZERO,
    BatchEntry,
    BatchListEntry,
    KnownDate,
    LegacyEntry,
    NotApplicable,
    UnloadingReport,
    UnparseableDate,
    parse_quantity,
)

from .contracts import IssueKind, ReconciliationResult
from .events import DiagnosticEvent, Severity, default_sink

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from decimal import Decimal

    from goodsreceipt.domain.model import DateValue, PostedBatch, PurchaseOrderLineItem

    from .contracts import MatchedEntry
    from .events import DiagnosticSink

STAGE = "batch_aggregator"


class AggregateBatches(Protocol):
    def __call__(
        self,
        line_item: PurchaseOrderLineItem,
        matched_entries: Sequence[MatchedEntry],
        posted_batches: Sequence[PostedBatch],
        *,
        emit: DiagnosticSink | None = None,
    ) -> ReconciliationResult: ...


def posted_lot_keys(posted_batches: Iterable[PostedBatch]) -> frozenset[str]:
    return frozenset(batch.lot_key for batch in posted_batches if batch.lot_key)


@singledispatch
def entry_batches(entry: object, report: UnloadingReport) -> tuple[BatchEntry, ...]:
    """Uniform batch sequence for one report entry, stamped with its source report."""

    raise TypeError(f"Unsupported report entry {type(entry).__name__} in report {report.id}")


@entry_batches.register
def _(entry: BatchListEntry, report: UnloadingReport) -> tuple[BatchEntry, ...]:
    return tuple(
        replace(batch, source_report_id=report.id, source_report_date=report.filled_at)
        for batch in entry.batches
    )


@entry_batches.register
def _(entry: LegacyEntry, report: UnloadingReport) -> tuple[BatchEntry, ...]:
    return (
        BatchEntry(
            batch_number=None,
            unloaded_quantity=entry.unloaded_quantity,
            expiry=entry.expiry,
            source_report_id=report.id,
            source_report_date=report.filled_at,
            synthesized=True,
        ),
    )


def aggregate(
    line_item: PurchaseOrderLineItem,
    matched_entries: Sequence[MatchedEntry],
    posted_batches: Sequence[PostedBatch],
    *,
    emit: DiagnosticSink | None = None,
) -> ReconciliationResult:
    """Reconcile every matched entry against the posted-batch ledger."""

    sink = emit or default_sink()
    posted = posted_lot_keys(posted_batches)
    retained: list[BatchEntry] = []
    contributing_reports: set[str] = set()
    excluded = 0

    for report, entry in matched_entries:
        try:
            candidates = entry_batches(entry, report)
        except (TypeError, ValueError) as exc:
            sink(
                DiagnosticEvent(
                    stage=STAGE,
                    severity=Severity.ERROR,
                    code=IssueKind.MALFORMED_RECORD,
                    message=f"Skipping unusable report entry: {exc}",
                    context={"line_item_id": line_item.id, "report_id": report.id},
                )
            )
            continue

        for batch in candidates:
            if batch.lot_key and batch.lot_key in posted:
                excluded += 1
                sink(
                    DiagnosticEvent(
                        stage=STAGE,
                        severity=Severity.DEBUG,
                        message="Batch already posted to inventory",
                        context={
                            "line_item_id": line_item.id,
                            "report_id": report.id,
                            "batch_number": batch.batch_number,
                        },
                    )
                )
                continue
            retained.append(batch)
            contributing_reports.add(report.id)

    matched = bool(matched_entries)
    if matched and not retained:
        sink(
            DiagnosticEvent(
                stage=STAGE,
                severity=Severity.INFO,
                code=IssueKind.ALL_BATCHES_ALREADY_POSTED,
                message="Every reported batch has already been posted",
                context={"line_item_id": line_item.id, "excluded": excluded},
            )
        )

    result = ReconciliationResult(
        matched=matched,
        batches=tuple(retained),
        aggregate_quantity=_aggregate_quantity(line_item, retained, sink=sink),
        representative_expiry=representative_expiry(retained, line_item_id=line_item.id, emit=sink),
        reports_count=len(contributing_reports),
    )
    sink(
        DiagnosticEvent(
            stage=STAGE,
            severity=Severity.DEBUG,
            message="Aggregated batches for order line",
            context={
                "line_item_id": line_item.id,
                "retained": len(result.batches),
                "excluded": excluded,
                "reports": result.reports_count,
                "quantity": result.aggregate_quantity,
            },
        )
    )
    return result


def _aggregate_quantity(
    line_item: PurchaseOrderLineItem,
    batches: Sequence[BatchEntry],
    *,
    sink: DiagnosticSink,
) -> Decimal:
    total = ZERO
    for batch in batches:
        quantity = parse_quantity(batch.unloaded_quantity)
        if quantity is None:
            if batch.unloaded_quantity is not None and batch.unloaded_quantity.strip():
                sink(
                    DiagnosticEvent(
                        stage=STAGE,
                        severity=Severity.WARNING,
                        code=IssueKind.MALFORMED_QUANTITY,
                        message="Ignoring unparseable unloaded quantity",
                        context={
                            "line_item_id": line_item.id,
                            "report_id": batch.source_report_id,
                            "raw": batch.unloaded_quantity,
                        },
                    )
                )
            continue
        total += quantity
    if total == ZERO:
        return line_item.quantity
    return total


def representative_expiry(
    batches: Iterable[BatchEntry],
    *,
    line_item_id: str | None = None,
    emit: DiagnosticSink | None = None,
) -> DateValue:
    """First valid date in processing order.

    Falls back to ``NOT_APPLICABLE`` only when no batch has a valid date and at least
    one declared that no expiry date applies.
    """

    sink = emit or default_sink()
    first_known: KnownDate | None = None
    declared_not_applicable = False
    for batch in batches:
        expiry = batch.expiry
        if isinstance(expiry, KnownDate):
            if first_known is None:
                first_known = expiry
        elif isinstance(expiry, NotApplicable):
            declared_not_applicable = True
        elif isinstance(expiry, UnparseableDate) and not expiry.is_missing:
            sink(
                DiagnosticEvent(
                    stage=STAGE,
                    severity=Severity.WARNING,
                    code=IssueKind.MALFORMED_DATE,
                    message="Treating unparseable expiry date as missing",
                    context={
                        "line_item_id": line_item_id,
                        "report_id": batch.source_report_id,
                        "batch_number": batch.batch_number,
                        "raw": expiry.raw,
                    },
                )
            )

    if first_known is not None:
        return first_known
    if declared_not_applicable:
        return NOT_APPLICABLE
    return NO_DATE
