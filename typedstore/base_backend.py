"""Engine abstraction layer.

Defines the minimal surface the table and row managers need from a storage
engine so the SQLite implementation can be swapped (or faked in tests).

KISS: Only the operations the managers issue are abstracted. Implementations
raise ``EngineError`` carrying the engine's own message on failure.
"""
from __future__ import annotations
from typing import Any, ContextManager, List, Protocol, Sequence

class CursorLike(Protocol):  # pragma: no cover - structural typing helper
    lastrowid: Any
    rowcount: int

class Engine(Protocol):
    def execute(self, sql: str, params: Sequence[Any] = ()) -> CursorLike:
        """Run one statement with bound parameters."""
        ...

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Any]:
        """Run a SELECT and return all rows as mappings."""
        ...

    def count(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a single-value query (e.g. SELECT COUNT(*)) and return it as int."""
        ...

    def transaction(self) -> ContextManager[None]:
        """BEGIN on enter, COMMIT on success, ROLLBACK if the block raises."""
        ...

    def close(self) -> None:
        ...
