"""Error kinds raised by the schema, validation, codec and engine layers.

Every error carries a ``kind`` string. Public ``Database`` operations catch
``TypedStoreError`` and turn it into the usual result dict via
``to_result()``; nothing below the facade returns dicts.
"""
from __future__ import annotations
from typing import Any, Dict


class TypedStoreError(Exception):
    kind = "Error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.details = details

    def to_result(self, **extra: Any) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": False, "kind": self.kind, "error": str(self)}
        out.update(self.details)
        out.update(extra)
        return out


class InvalidNameError(TypedStoreError):
    kind = "InvalidName"

class InvalidSchemaError(TypedStoreError):
    kind = "InvalidSchema"

class ReservedColumnNameError(TypedStoreError):
    kind = "ReservedColumnName"

class DuplicateColumnNameError(TypedStoreError):
    kind = "DuplicateColumnName"

class TableAlreadyExistsError(TypedStoreError):
    kind = "TableAlreadyExists"

class TableNotFoundError(TypedStoreError):
    kind = "TableNotFound"

class InvalidRowError(TypedStoreError):
    kind = "InvalidRow"

class MissingRequiredColumnError(TypedStoreError):
    kind = "MissingRequiredColumn"

class InvalidColumnTypeError(TypedStoreError):
    kind = "InvalidColumnType"

class UnknownColumnError(TypedStoreError):
    kind = "UnknownColumn"

class InvalidLimitError(TypedStoreError):
    kind = "InvalidLimit"

class InvalidSortError(TypedStoreError):
    kind = "InvalidSort"

class BatchMismatchError(TypedStoreError):
    kind = "BatchMismatch"

class RowNotFoundError(TypedStoreError):
    kind = "RowNotFound"

class DecodeError(TypedStoreError):
    kind = "DecodeError"

class EngineError(TypedStoreError):
    """SQLite rejected a statement; the message is SQLite's own."""
    kind = "EngineError"
