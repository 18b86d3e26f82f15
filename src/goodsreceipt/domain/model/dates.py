"""Expiry-date values.

Warehouse documents carry dates in several shapes: native ``date``/``datetime``
objects, ISO-8601 strings, and ``{"seconds": ..., "nanoseconds": ...}`` timestamp
mappings written by the document store SDKs. ``to_date_value`` is the one
conversion used wherever such a value is read; it never raises.

The result keeps three cases apart:

- ``KnownDate``: a usable calendar value
- ``UnparseableDate``: nothing usable (``raw`` is ``None`` when the field was absent)
- ``NotApplicable``: the document explicitly declared that no expiry date exists
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Final, cast


@dataclass(frozen=True, slots=True)
class KnownDate:
    value: date

    def isoformat(self) -> str:
        return self.value.isoformat()


@dataclass(frozen=True, slots=True, eq=False)
class UnparseableDate:
    raw: object = None

    @property
    def is_missing(self) -> bool:
        return self.raw is None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnparseableDate):
            return NotImplemented
        return self.raw == other.raw

    def __hash__(self) -> int:
        return hash((UnparseableDate, repr(self.raw)))


@dataclass(frozen=True, slots=True)
class NotApplicable:
    pass


type DateValue = KnownDate | UnparseableDate | NotApplicable

NOT_APPLICABLE: Final = NotApplicable()
NO_DATE: Final = UnparseableDate()

_SECONDS_KEYS: Final = ("seconds", "_seconds")
_NANOS_KEYS: Final = ("nanoseconds", "_nanoseconds", "nanos")


def to_date_value(raw: object, *, not_applicable: bool = False) -> DateValue:
    """Convert a raw document value into a ``DateValue``."""

    if not_applicable:
        return NOT_APPLICABLE
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return NO_DATE
    parsed = parse_date(raw)
    if parsed is None:
        return UnparseableDate(raw=raw)
    return KnownDate(parsed)


def parse_date(raw: object) -> date | None:
    """Return a ``date`` (or aware ``datetime``) for ``raw``; ``None`` if unusable."""

    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=UTC)
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        return _parse_iso(raw)
    if isinstance(raw, Mapping):
        return _parse_timestamp(cast("Mapping[str, object]", raw))
    return None


def _parse_iso(value: str) -> date | None:
    normalized = value.strip()
    if not normalized:
        return None
    try:
        return date.fromisoformat(normalized)
    except ValueError:
        pass
    if normalized.endswith(("Z", "z")):
        normalized = normalized[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_timestamp(value: Mapping[str, object]) -> datetime | None:
    seconds = _first_number(value, _SECONDS_KEYS)
    if seconds is None:
        return None
    nanos = _first_number(value, _NANOS_KEYS) or 0.0
    try:
        return datetime.fromtimestamp(seconds + nanos / 1_000_000_000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _first_number(value: Mapping[str, object], keys: tuple[str, ...]) -> float | None:
    for key in keys:
        candidate = value.get(key)
        if candidate is None or isinstance(candidate, bool):
            continue
        if isinstance(candidate, int | float):
            number = float(candidate)
        elif isinstance(candidate, str):
            try:
                number = float(candidate.strip())
            except ValueError:
                return None
        else:
            return None
        return number if math.isfinite(number) else None
    return None
