"""Goods-receipt reconciliation core.

Layered flow for one order line:
1) match report entries to the line by exact line id
2) classify the match for operator diagnostics
3) aggregate retained batches against the posted-batch ledger
4) build the receiving request, or report why receiving is blocked
"""

from __future__ import annotations

from .aggregate import aggregate, representative_expiry
from .contracts import (
    AllBatchesAlreadyPosted,
    IssueKind,
    ItemNotReported,
    LineStatus,
    MatchDiagnosis,
    MatchedEntry,
    MatchType,
    MissingOrderNumber,
    ReconciliationResult,
)
from .diagnostics import classify
from .engine import LineReconciliation, ReconciliationEngine
from .events import (
    CollectingDiagnosticSink,
    DiagnosticEvent,
    DiagnosticSink,
    LoggingDiagnosticSink,
    Severity,
)
from .match import match_entries
from .receiving import ReceivingBatch, ReceivingRequest, build_receiving_request

__all__ = [
    "AllBatchesAlreadyPosted",
    "CollectingDiagnosticSink",
    "DiagnosticEvent",
    "DiagnosticSink",
    "IssueKind",
    "ItemNotReported",
    "LineReconciliation",
    "LineStatus",
    "LoggingDiagnosticSink",
    "MatchDiagnosis",
    "MatchType",
    "MatchedEntry",
    "MissingOrderNumber",
    "ReceivingBatch",
    "ReceivingRequest",
    "ReconciliationEngine",
    "ReconciliationResult",
    "Severity",
    "aggregate",
    "build_receiving_request",
    "classify",
    "match_entries",
    "representative_expiry",
]
