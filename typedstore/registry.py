"""In-memory registry of table models.

Keys are case-folded because SQLite treats identifiers case-insensitively;
enumeration follows registration order.
"""
from __future__ import annotations
from typing import Dict, Iterator, List, Optional

from .errors import TableAlreadyExistsError
from .types import TableModel


class SchemaRegistry:
    def __init__(self):
        self._models: Dict[str, TableModel] = {}

    def register(self, model: TableModel) -> None:
        key = model.name.lower()
        if key in self._models:
            raise TableAlreadyExistsError(f"Table '{model.name}' already exists", table=model.name)
        self._models[key] = model

    def lookup(self, name: str) -> Optional[TableModel]:
        return self._models.get(name.lower())

    def unregister(self, name: str) -> None:
        self._models.pop(name.lower(), None)

    def names(self) -> List[str]:
        return [m.name for m in self._models.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._models

    def __iter__(self) -> Iterator[TableModel]:
        return iter(list(self._models.values()))

    def __len__(self) -> int:
        return len(self._models)
