"""Explain why an order line did or did not match any unloading report.

Runs independently of ``match_entries`` and has no say in whether receiving is
allowed. It compares both the exact line id and the trimmed, case-insensitive
product name, so the operator can tell a line that was never reported from one
that was reported against a different line carrying the same product name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from goodsreceipt.domain.model import normalize_product_name

from .contracts import MatchDiagnosis, MatchType
from .match import is_exact_match

if TYPE_CHECKING:
    from collections.abc import Sequence

    from goodsreceipt.domain.model import PurchaseOrderLineItem, UnloadingReport


class ClassifyMatch(Protocol):
    def __call__(
        self,
        line_item: PurchaseOrderLineItem,
        reports: Sequence[UnloadingReport],
    ) -> MatchDiagnosis: ...


def classify(
    line_item: PurchaseOrderLineItem,
    reports: Sequence[UnloadingReport],
) -> MatchDiagnosis:
    """Classify ``line_item`` across every report of its order.

    ``conflict_count`` counts entries sharing the line's product name without
    carrying its id.
    """

    target_name = normalize_product_name(line_item.name)
    reports_with_id_match = 0
    name_only_entries = 0
    for report in reports:
        report_has_id_match = False
        for entry in report.selected_items:
            if is_exact_match(line_item.id, entry):
                report_has_id_match = True
                continue
            if target_name and normalize_product_name(entry.product_name) == target_name:
                name_only_entries += 1
        if report_has_id_match:
            reports_with_id_match += 1

    if reports_with_id_match and name_only_entries:
        match_type = MatchType.BOTH
    elif reports_with_id_match:
        match_type = MatchType.BY_ID
    elif name_only_entries:
        match_type = MatchType.BY_NAME_ONLY
    else:
        match_type = MatchType.NONE

    return MatchDiagnosis(
        match_type=match_type,
        message=_message(
            match_type,
            line_item=line_item,
            reports_scanned=len(reports),
            reports_with_id_match=reports_with_id_match,
            conflict_count=name_only_entries,
        ),
        conflict_count=name_only_entries,
        reports_with_id_match=reports_with_id_match,
    )


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def _message(
    match_type: MatchType,
    *,
    line_item: PurchaseOrderLineItem,
    reports_scanned: int,
    reports_with_id_match: int,
    conflict_count: int,
) -> str:
    name = line_item.name or line_item.id
    reported_in = _plural(reports_with_id_match, "unloading report", "unloading reports")
    conflicts = _plural(conflict_count, "entry", "entries")

    if match_type is MatchType.BY_ID:
        return f"'{name}' was reported in {reported_in}."
    if match_type is MatchType.BOTH:
        return (
            f"'{name}' was reported in {reported_in}; {conflicts} with the same product "
            "name belong to a different order line."
        )
    if match_type is MatchType.BY_NAME_ONLY:
        return (
            f"'{name}' appears in {conflicts} by product name only. The delivery was "
            "probably reported against a different order line; correct the unloading "
            f"report to select line {line_item.id} before receiving."
        )
    if reports_scanned == 0:
        return "No unloading reports exist for this order yet."
    scanned = _plural(reports_scanned, "unloading report", "unloading reports")
    return f"'{name}' is not mentioned in any of the {scanned} for this order."
