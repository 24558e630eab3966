"""Row validation against a table model.

Values are classified into ``TaggedValue`` first; the rules below only look
at the tag, never at ``type(value)`` directly.
"""
from __future__ import annotations
import math
from collections.abc import Mapping
from typing import Any, Dict

from .errors import (
    DuplicateColumnNameError, InvalidColumnTypeError, InvalidRowError,
    MissingRequiredColumnError, ReservedColumnNameError, UnknownColumnError,
)
from .types import ID_COLUMN, ColumnModel, TableModel, TaggedValue, ValueKind

# SQLite INTEGER is a signed 64-bit value
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_ACCEPTED = {
    "boolean": {ValueKind.BOOLEAN},
    "string": {ValueKind.TEXT},
    "int": {ValueKind.INTEGER},
    "real": {ValueKind.INTEGER, ValueKind.REAL},
    "date": {ValueKind.TIMESTAMP},
    "object": {ValueKind.MAPPING},
    "array": {ValueKind.SEQUENCE},
}


def _is_integral_real(tagged: TaggedValue) -> bool:
    return tagged.kind is ValueKind.REAL and float(tagged.value).is_integer()


def _kind_matches(column: ColumnModel, tagged: TaggedValue) -> bool:
    if tagged.kind in _ACCEPTED.get(column.type, ()):
        return True
    # 3.0 is an acceptable int, 2.5 is not
    return column.type == "int" and _is_integral_real(tagged)


def _storable(column: ColumnModel, tagged: TaggedValue) -> bool:
    """False for numbers SQLite would reject (out of int64) or silently turn into NULL (NaN)."""
    if tagged.kind is ValueKind.INTEGER:
        return INT64_MIN <= tagged.value <= INT64_MAX
    if tagged.kind is ValueKind.REAL:
        value = float(tagged.value)
        if not math.isfinite(value):
            return False
        if column.type == "int":
            return INT64_MIN <= math.floor(value) <= INT64_MAX
    return True


def validate(column: ColumnModel, tagged: TaggedValue) -> bool:
    if tagged.is_absent:
        return not column.required
    return _kind_matches(column, tagged) and _storable(column, tagged)


def check_value(column: ColumnModel, tagged: TaggedValue) -> None:
    """Raise the error describing why ``tagged`` does not fit ``column``."""
    if validate(column, tagged):
        return
    if tagged.is_absent:
        raise MissingRequiredColumnError(f"Missing required column '{column.name}'", column=column.name)
    if _kind_matches(column, tagged):
        raise InvalidColumnTypeError(
            f"Column '{column.name}' expected {column.type}, got {tagged.describe()} {tagged.value!r} "
            f"which cannot be stored (non-finite or outside the 64-bit integer range)",
            column=column.name, expected=column.type, actual=tagged.describe(),
        )
    raise InvalidColumnTypeError(
        f"Column '{column.name}' expected {column.type}, got {tagged.describe()}",
        column=column.name, expected=column.type, actual=tagged.describe(),
    )


def validate_row(model: TableModel, row: Any) -> Dict[str, TaggedValue]:
    """Validate ``row`` and return its declared columns as tagged values, in column order."""
    if not isinstance(row, Mapping):
        raise InvalidRowError(f"Row must be a mapping, got {type(row).__name__}", table=model.name)
    values: Dict[str, Any] = {}
    for key, value in row.items():
        if not isinstance(key, str):
            raise InvalidRowError(f"Row keys must be column names, got {key!r}", table=model.name)
        if key.lower() == ID_COLUMN:
            raise ReservedColumnNameError(
                f"Column '{key}' is assigned by the database and cannot be supplied", column=key)
        column = model.column(key)
        if column is None:
            raise UnknownColumnError(
                f"Unknown column '{key}' for table '{model.name}'. Available columns: {', '.join(model.describe())}",
                columns=[key], table=model.name,
            )
        if column.name in values:
            raise DuplicateColumnNameError(
                f"Row supplies column '{column.name}' more than once (keys differ only by case)",
                column=column.name, table=model.name,
            )
        values[column.name] = value
    tagged_row: Dict[str, TaggedValue] = {}
    for column in model.columns:
        tagged = TaggedValue.of(values.get(column.name))
        check_value(column, tagged)
        tagged_row[column.name] = tagged
    return tagged_row
