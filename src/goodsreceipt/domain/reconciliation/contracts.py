"""Shared reconciliation contract components.

This module intentionally holds only:
- result and diagnosis dataclasses passed between stages
- the issue types returned (never raised) to callers
- enums classifying matches and line outcomes
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

from goodsreceipt.domain.model import NotApplicable

if TYPE_CHECKING:
    from decimal import Decimal

    from goodsreceipt.domain.model import (
        BatchEntry,
        DateValue,
        SelectedItemEntry,
        UnloadingReport,
    )


type MatchedEntry = tuple[UnloadingReport, SelectedItemEntry]


class MatchType(StrEnum):
    """How an order line appears across the unloading reports of its order."""

    NONE = "none"
    BY_ID = "by_id"
    BY_NAME_ONLY = "by_name_only"
    BOTH = "both"


class IssueKind(StrEnum):
    ITEM_NOT_REPORTED = "item_not_reported"
    ALL_BATCHES_ALREADY_POSTED = "all_batches_already_posted"
    MALFORMED_DATE = "malformed_date"
    MALFORMED_QUANTITY = "malformed_quantity"
    MALFORMED_RECORD = "malformed_record"
    MISSING_ORDER_NUMBER = "missing_order_number"


class LineStatus(StrEnum):
    NOT_REPORTED = "not_reported"
    READY = "ready"
    ALL_BATCHES_ALREADY_POSTED = "all_batches_already_posted"


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchDiagnosis:
    """Operator-facing explanation of a line's match state. Never authoritative."""

    match_type: MatchType
    message: str
    conflict_count: int = 0
    reports_with_id_match: int = 0

    @property
    def reported(self) -> bool:
        return self.match_type in {MatchType.BY_ID, MatchType.BOTH}


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationResult:
    """What remains to be posted for one order line."""

    matched: bool
    batches: tuple[BatchEntry, ...]
    aggregate_quantity: Decimal
    representative_expiry: DateValue
    reports_count: int

    @property
    def has_no_expiry_date(self) -> bool:
        return isinstance(self.representative_expiry, NotApplicable)

    @property
    def all_batches_already_posted(self) -> bool:
        return self.matched and not self.batches


@dataclass(frozen=True, slots=True, kw_only=True)
class ItemNotReported:
    """Receiving is blocked: no report entry carries this line's id."""

    line_item_id: str
    line_item_name: str
    diagnosis: MatchDiagnosis
    kind: Literal[IssueKind.ITEM_NOT_REPORTED] = IssueKind.ITEM_NOT_REPORTED

    @property
    def match_type(self) -> MatchType:
        return self.diagnosis.match_type

    @property
    def message(self) -> str:
        return f"[{self.diagnosis.match_type}] {self.diagnosis.message}"


@dataclass(frozen=True, slots=True, kw_only=True)
class AllBatchesAlreadyPosted:
    """Every reported lot is already in inventory. Not an error."""

    line_item_id: str
    posted_count: int
    kind: Literal[IssueKind.ALL_BATCHES_ALREADY_POSTED] = IssueKind.ALL_BATCHES_ALREADY_POSTED

    @property
    def message(self) -> str:
        return "Nothing left to receive: every reported batch has already been posted."


@dataclass(frozen=True, slots=True, kw_only=True)
class MissingOrderNumber:
    """The order has no number, so no report can be looked up for any of its lines."""

    order_id: str
    kind: Literal[IssueKind.MISSING_ORDER_NUMBER] = IssueKind.MISSING_ORDER_NUMBER

    @property
    def message(self) -> str:
        return (
            f"Purchase order {self.order_id} has no order number; "
            "unloading reports cannot be matched and receiving is disabled."
        )
