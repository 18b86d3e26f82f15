"""Exact-identity matching of report entries to an order line.

This is the only gate deciding whether a line may proceed to receiving. A report
entry belongs to a line when its ``po_item_id`` equals the line id, compared
exactly. Product names are never consulted here; an earlier name-based fallback
let operators receive lots against the wrong line, see ``diagnostics`` for the
name comparison that only explains failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .events import DiagnosticEvent, Severity, default_sink

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from goodsreceipt.domain.model import (
        PurchaseOrderLineItem,
        SelectedItemEntry,
        UnloadingReport,
    )

    from .contracts import MatchedEntry
    from .events import DiagnosticSink

STAGE = "item_matcher"


class MatchEntries(Protocol):
    """Select the report entries that authorize receiving for a line."""

    def __call__(
        self,
        line_item: PurchaseOrderLineItem,
        reports: Sequence[UnloadingReport],
        *,
        emit: DiagnosticSink | None = None,
    ) -> list[MatchedEntry]: ...


def is_exact_match(line_item_id: str, entry: SelectedItemEntry) -> bool:
    return bool(entry.po_item_id) and entry.po_item_id == line_item_id


def first_exact_match(
    line_item_id: str,
    entries: Iterable[SelectedItemEntry],
) -> SelectedItemEntry | None:
    for entry in entries:
        if is_exact_match(line_item_id, entry):
            return entry
    return None


def match_entries(
    line_item: PurchaseOrderLineItem,
    reports: Sequence[UnloadingReport],
    *,
    emit: DiagnosticSink | None = None,
) -> list[MatchedEntry]:
    """Pair each report with its first entry for ``line_item``; at most one per report."""

    sink = emit or default_sink()
    matched: list[MatchedEntry] = []
    for report in reports:
        entry = first_exact_match(line_item.id, report.selected_items)
        if entry is None:
            continue
        matched.append((report, entry))

    sink(
        DiagnosticEvent(
            stage=STAGE,
            severity=Severity.DEBUG,
            message="Matched order line against unloading reports",
            context={
                "line_item_id": line_item.id,
                "reports_scanned": len(reports),
                "reports_matched": len(matched),
            },
        )
    )
    return matched
