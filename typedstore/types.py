"""Logical column types, table models and tagged row values.

Logical types are the application-facing vocabulary (boolean, string, int,
real, date, object, array). Each maps to a SQLite column type; date, object
and array are stored as text (ISO-8601 / JSON).
"""
from __future__ import annotations
import numbers
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import InvalidSchemaError

ID_COLUMN = "id"
ID_COLUMN_DDL = f"{ID_COLUMN} INTEGER PRIMARY KEY"

LOGICAL_TYPES: Tuple[str, ...] = ("boolean", "string", "int", "real", "date", "object", "array")

PHYSICAL_TYPES: Dict[str, str] = {
    "boolean": "BOOLEAN",  # stored as integer 0/1
    "string": "TEXT",
    "int": "INTEGER",
    "real": "REAL",
    "date": "TEXT",
    "object": "TEXT",
    "array": "TEXT",
}

_LOGICAL_FOR_PHYSICAL = {"BOOLEAN": "boolean", "INTEGER": "int", "REAL": "real"}


def physical_type(logical: str) -> str:
    """Return the SQLite column type for a logical type; unknown types map to TEXT."""
    return PHYSICAL_TYPES.get(logical, "TEXT")


def logical_type(physical: str) -> str:
    """Canonical logical type for a SQLite column type (TEXT and anything unrecognised -> string)."""
    return _LOGICAL_FOR_PHYSICAL.get(physical.strip().upper(), "string")


@dataclass(frozen=True)
class ColumnModel:
    name: str
    type: str
    required: bool = False

    @classmethod
    def from_dict(cls, raw: Any) -> "ColumnModel":
        if isinstance(raw, ColumnModel):
            return raw
        if not isinstance(raw, Mapping):
            raise InvalidSchemaError(f"Column definition must be a mapping, got {type(raw).__name__}")
        try:
            name, col_type = raw["name"], raw["type"]
        except KeyError as e:
            raise InvalidSchemaError(f"Column definition missing key {e.args[0]!r}") from e
        if not isinstance(name, str) or not isinstance(col_type, str):
            raise InvalidSchemaError("Column name and type must be strings", column=name)
        return cls(name=name, type=col_type, required=bool(raw.get("required", False)))

    @property
    def physical_type(self) -> str:
        return physical_type(self.type)

    def ddl(self) -> str:
        sql = f'"{self.name}" {self.physical_type}'
        return sql + " NOT NULL" if self.required else sql


@dataclass(frozen=True)
class TableModel:
    name: str
    columns: Tuple[ColumnModel, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # lists are accepted for convenience; stored as a tuple so the model stays immutable
        object.__setattr__(self, "columns", tuple(ColumnModel.from_dict(c) for c in self.columns))

    @classmethod
    def from_dict(cls, raw: Mapping) -> "TableModel":
        try:
            name, columns = raw["name"], raw.get("columns", ())
        except KeyError as e:
            raise InvalidSchemaError(f"Table definition missing key {e.args[0]!r}") from e
        if not isinstance(name, str):
            raise InvalidSchemaError("Table name must be a string")
        if isinstance(columns, (str, bytes, Mapping)) or not hasattr(columns, "__iter__"):
            raise InvalidSchemaError("Table columns must be a list of column definitions", table=name)
        return cls(name=name, columns=tuple(columns))

    @classmethod
    def coerce(cls, raw: Any) -> "TableModel":
        if isinstance(raw, TableModel):
            return raw
        if isinstance(raw, Mapping):
            return cls.from_dict(raw)
        raise InvalidSchemaError(f"Table definition must be a TableModel or mapping, got {type(raw).__name__}")

    def column(self, name: str) -> Optional[ColumnModel]:
        key = name.lower()
        for col in self.columns:
            if col.name.lower() == key:
                return col
        return None

    def column_names(self, include_id: bool = True) -> List[str]:
        names = [c.name for c in self.columns]
        return [ID_COLUMN] + names if include_id else names

    def describe(self) -> List[str]:
        """``name (type)`` entries for messages, identifier first."""
        return [f"{ID_COLUMN} (int)"] + [f"{c.name} ({c.type})" for c in self.columns]


class ValueKind(Enum):
    """Runtime kind of a row value, named after the logical type it satisfies."""
    ABSENT = "null"
    BOOLEAN = "boolean"
    TEXT = "string"
    INTEGER = "int"
    REAL = "real"
    TIMESTAMP = "date"
    MAPPING = "object"
    SEQUENCE = "array"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class TaggedValue:
    kind: ValueKind
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> "TaggedValue":
        if value is None:
            return cls(ValueKind.ABSENT)
        # bool is an Integral subclass; classify it first
        if isinstance(value, bool):
            return cls(ValueKind.BOOLEAN, value)
        if isinstance(value, str):
            return cls(ValueKind.TEXT, value)
        if isinstance(value, numbers.Integral):
            return cls(ValueKind.INTEGER, value)
        if isinstance(value, numbers.Real):
            return cls(ValueKind.REAL, value)
        if isinstance(value, datetime):
            return cls(ValueKind.TIMESTAMP, value)
        if isinstance(value, Mapping):
            return cls(ValueKind.MAPPING, value)
        if isinstance(value, (list, tuple)):
            return cls(ValueKind.SEQUENCE, value)
        return cls(ValueKind.UNSUPPORTED, value)

    @property
    def is_absent(self) -> bool:
        return self.kind is ValueKind.ABSENT

    def describe(self) -> str:
        if self.kind is ValueKind.UNSUPPORTED:
            return type(self.value).__name__
        return self.kind.value
