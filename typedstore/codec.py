"""Encoding of tagged values into sqlite3 parameters and decoding of stored values.

object/array travel as JSON text, date as ISO-8601 text, boolean as 0/1.
"""
from __future__ import annotations
import json, math
from datetime import datetime
from typing import Any, Dict, List, Mapping

from .errors import DecodeError, InvalidColumnTypeError
from .types import ColumnModel, TableModel, TaggedValue


def encode_value(column: ColumnModel, tagged: TaggedValue) -> Any:
    if tagged.is_absent:
        return None
    value = tagged.value
    if column.type in ("object", "array"):
        try:
            return json.dumps(value if column.type == "object" else list(value))
        except (TypeError, ValueError) as e:
            raise InvalidColumnTypeError(
                f"Column '{column.name}' value is not JSON serializable: {e}", column=column.name) from e
    if column.type == "date":
        return value.isoformat()
    if column.type == "int":
        return int(math.floor(value))
    return value


def encode_row(model: TableModel, tagged_row: Mapping[str, TaggedValue]) -> List[Any]:
    """Parameters for an INSERT over ``model.columns``, in declared order."""
    return [encode_value(c, tagged_row.get(c.name, TaggedValue.of(None))) for c in model.columns]


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in ("1", "true")
    return bool(raw)


def decode_value(column: ColumnModel, raw: Any) -> Any:
    if raw is None:
        return None
    try:
        if column.type in ("object", "array"):
            return json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        if column.type == "int":
            return int(raw)
        if column.type == "real":
            return float(raw)
        if column.type == "boolean":
            return _to_bool(raw)
        if column.type == "date":
            return datetime.fromisoformat(raw) if isinstance(raw, str) else raw
    except (TypeError, ValueError) as e:
        raise DecodeError(
            f"Column '{column.name}' holds a value that cannot be read as {column.type}: {raw!r}",
            column=column.name,
        ) from e
    return raw


def decode_row(model: TableModel, row: Mapping[str, Any]) -> Dict[str, Any]:
    """Decode a fetched row; columns unknown to the model (e.g. ``id``) pass through."""
    out: Dict[str, Any] = {}
    for key, raw in row.items():
        column = model.column(key)
        out[key] = raw if column is None else decode_value(column, raw)
    return out
