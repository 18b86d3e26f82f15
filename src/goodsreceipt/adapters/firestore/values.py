"""Conversion between Firestore REST typed values and plain Python values."""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import cast

_FRACTION = re.compile(r"\.(\d{6})\d+")


class ValueDecodeError(ValueError):
    """Raised for a typed value carrying no known value kind."""


def decode_value(value: Mapping[str, object]) -> object:
    """Decode one typed value, e.g. ``{"integerValue": "3"}`` -> ``3``."""

    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(str(value["integerValue"]))
    if "doubleValue" in value:
        return float(cast("float | str", value["doubleValue"]))
    if "timestampValue" in value:
        return parse_timestamp(str(value["timestampValue"]))
    if "stringValue" in value:
        return str(value["stringValue"])
    if "referenceValue" in value:
        return str(value["referenceValue"])
    if "bytesValue" in value:
        return str(value["bytesValue"])
    if "geoPointValue" in value:
        return dict(cast("Mapping[str, object]", value["geoPointValue"]))
    if "arrayValue" in value:
        array = cast("Mapping[str, object]", value["arrayValue"] or {})
        items = cast("list[Mapping[str, object]]", array.get("values") or [])
        return [decode_value(item) for item in items]
    if "mapValue" in value:
        mapping = cast("Mapping[str, object]", value["mapValue"] or {})
        return decode_fields(cast("Mapping[str, Mapping[str, object]]", mapping.get("fields") or {}))
    raise ValueDecodeError(f"Unknown Firestore value kind: {sorted(value)}")


def decode_fields(fields: Mapping[str, Mapping[str, object]]) -> dict[str, object]:
    return {name: decode_value(typed) for name, typed in fields.items()}


def encode_value(value: object) -> dict[str, object]:
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        aware = value if value.tzinfo else value.replace(tzinfo=UTC)
        return {"timestampValue": aware.astimezone(UTC).isoformat().replace("+00:00", "Z")}
    if isinstance(value, str):
        return {"stringValue": value}
    raise TypeError(f"Cannot encode {type(value).__name__} as a Firestore value")


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 timestamp; nanosecond precision is truncated to microseconds."""

    normalized = text.strip()
    if normalized.endswith(("Z", "z")):
        normalized = normalized[:-1] + "+00:00"
    normalized = _FRACTION.sub(r".\1", normalized)
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def document_id(name: str) -> str:
    """Last path segment of a full document resource name."""

    return name.rstrip("/").rsplit("/", 1)[-1]
