"""
Field maps and field value rendering.

Every value attached to a log entry falls into exactly one FieldKind. The
text formatter renders fields by kind, in sorted key order, so the same field
set always produces the same bytes.
"""

import json
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

# Log fields, e.g. F(user="x", count=3) or F({"k": "v"})
F = dict

EMPTY: Mapping[str, Any] = MappingProxyType({})


class Raw(str):
    """A string rendered verbatim, without quoting or escaping."""

    __slots__ = ()


class FieldKind(str, Enum):
    """Kinds of field values."""
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    TEXT = "text"
    BYTES = "bytes"
    RAW = "raw"
    OPAQUE = "opaque"


def classify(value: Any) -> FieldKind:
    """Map a value onto its FieldKind."""
    # Order matters: bool is an int, Raw is a str.
    if isinstance(value, bool):
        return FieldKind.BOOL
    if isinstance(value, int):
        return FieldKind.INT
    if isinstance(value, float):
        return FieldKind.FLOAT
    if isinstance(value, Raw):
        return FieldKind.RAW
    if isinstance(value, str):
        return FieldKind.TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return FieldKind.BYTES
    return FieldKind.OPAQUE


def stringify(value: Any) -> str:
    """str() that never raises."""
    try:
        return str(value)
    except Exception:
        try:
            return repr(value)
        except Exception:
            return f"<unprintable {type(value).__name__}>"


def _quote(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


_RENDERERS = {
    FieldKind.INT: str,
    FieldKind.FLOAT: str,
    FieldKind.BOOL: lambda v: "true" if v else "false",
    FieldKind.TEXT: _quote,
    FieldKind.BYTES: lambda v: _quote(bytes(v).decode("utf-8", errors="replace")),
    FieldKind.RAW: str.__str__,
    FieldKind.OPAQUE: stringify,
}


def render_value(value: Any) -> str:
    """Render a single field value for the text formatter."""
    return _RENDERERS[classify(value)](value)


def render_fields(data: Mapping[str, Any]) -> str:
    """
    Render a field map as `k1=v1 k2=v2`, keys sorted.

    Returns an empty string for an empty map.
    """
    return " ".join(f"{k}={render_value(data[k])}" for k in sorted(data))


def merge(base: Mapping[str, Any], extra: Mapping[str, Any]) -> Mapping[str, Any]:
    """Merge two field maps into a new read-only map; `extra` wins on conflict."""
    if not extra:
        return base
    merged = dict(base)
    merged.update(extra)
    return MappingProxyType(merged)


def to_json_value(value: Any) -> Any:
    """Convert a field value into something json.dumps accepts."""
    kind = classify(value)
    if kind in (FieldKind.INT, FieldKind.FLOAT, FieldKind.BOOL):
        return value
    if kind is FieldKind.BYTES:
        return bytes(value).decode("utf-8", errors="replace")
    if kind in (FieldKind.TEXT, FieldKind.RAW):
        return str.__str__(value)
    if value is None:
        return None
    return stringify(value)
