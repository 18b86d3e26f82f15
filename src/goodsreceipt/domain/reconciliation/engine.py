"""Orchestrator for the reconciliation stages.

The engine composes stage callables and does no I/O. Callers fetch the reports
and the posted-batch ledger first, then hand both snapshots in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .aggregate import aggregate
from .contracts import AllBatchesAlreadyPosted, ItemNotReported, LineStatus
from .diagnostics import classify
from .events import CollectingDiagnosticSink, default_sink
from .match import match_entries
from .receiving import ReceivingRequest, build_receiving_request

if TYPE_CHECKING:
    from collections.abc import Sequence

    from goodsreceipt.domain.model import (
        PostedBatch,
        PurchaseOrder,
        PurchaseOrderLineItem,
        UnloadingReport,
    )

    from .aggregate import AggregateBatches
    from .contracts import MatchDiagnosis, ReconciliationResult
    from .diagnostics import ClassifyMatch
    from .events import DiagnosticEvent, DiagnosticSink
    from .match import MatchEntries
    from .receiving import BuildReceivingRequest


@dataclass(frozen=True, slots=True, kw_only=True)
class LineReconciliation:
    """Outcome of reconciling one order line."""

    line_item: PurchaseOrderLineItem
    result: ReconciliationResult
    diagnosis: MatchDiagnosis
    outcome: ReceivingRequest | ItemNotReported
    posted_count: int = 0
    events: tuple[DiagnosticEvent, ...] = ()

    @property
    def status(self) -> LineStatus:
        if isinstance(self.outcome, ItemNotReported):
            return LineStatus.NOT_REPORTED
        if self.result.all_batches_already_posted:
            return LineStatus.ALL_BATCHES_ALREADY_POSTED
        return LineStatus.READY

    @property
    def receiving_request(self) -> ReceivingRequest | None:
        if isinstance(self.outcome, ReceivingRequest):
            return self.outcome
        return None

    @property
    def issue(self) -> ItemNotReported | AllBatchesAlreadyPosted | None:
        if isinstance(self.outcome, ItemNotReported):
            return self.outcome
        if self.result.all_batches_already_posted:
            return AllBatchesAlreadyPosted(
                line_item_id=self.line_item.id,
                posted_count=self.posted_count,
            )
        return None


@dataclass(slots=True)
class ReconciliationEngine:
    """Run matching, diagnostics, aggregation and request building for one line."""

    match: MatchEntries = match_entries
    classify: ClassifyMatch = classify
    aggregate: AggregateBatches = aggregate
    build: BuildReceivingRequest = build_receiving_request
    sink: DiagnosticSink = field(default_factory=default_sink)

    def reconcile(
        self,
        order: PurchaseOrder,
        line_item: PurchaseOrderLineItem,
        reports: Sequence[UnloadingReport],
        posted_batches: Sequence[PostedBatch],
    ) -> LineReconciliation:
        """Reconcile ``line_item`` against snapshots of its reports and ledger."""

        collector = CollectingDiagnosticSink(forward=self.sink)
        matched = self.match(line_item, reports, emit=collector)
        diagnosis = self.classify(line_item, reports)
        result = self.aggregate(line_item, matched, posted_batches, emit=collector)
        outcome = self.build(line_item, result, order, diagnosis=diagnosis)
        return LineReconciliation(
            line_item=line_item,
            result=result,
            diagnosis=diagnosis,
            outcome=outcome,
            posted_count=len(posted_batches),
            events=tuple(collector.events),
        )
