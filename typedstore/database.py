"""Schema-validated table and row operations over an embedded SQLite database.

Public methods never raise for expected conditions; they return
``{"success": True, ...}`` or ``{"success": False, "kind": ..., "error": ...}``.
"""
from __future__ import annotations
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .base_backend import Engine
from .codec import decode_row, encode_row
from .errors import (
    BatchMismatchError, DuplicateColumnNameError, InvalidLimitError, InvalidNameError,
    InvalidSortError, ReservedColumnNameError, RowNotFoundError, TableAlreadyExistsError,
    TableNotFoundError, TypedStoreError, UnknownColumnError,
)
from .logging_util import debug, error, info, warn
from .registry import SchemaRegistry
from .sqlite_backend import BackendConfig, SQLiteBackend
from .types import ID_COLUMN, ID_COLUMN_DDL, TableModel
from .validation import validate_row

Sort = Union[str, Tuple[str, str], List[str]]


def _quote(name: str) -> str:
    return f'"{name}"'


class Database:
    """Typed tables on one SQLite connection.

    Table manager: create_table / create_tables / drop_table
    Row manager:   insert_row / insert_rows / get_table / delete_row_by_id
    Diagnostics:   list_tables / get_model / describe_table / count_rows / health_check

    Batches stop at the first failure. Unless ``atomic=True`` the steps that
    already succeeded stay committed.
    """

    _NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

    def __init__(self, path: str = ":memory:", config: Optional[BackendConfig] = None,
                 engine: Optional[Engine] = None):
        self.path = path
        self.engine: Engine = engine if engine is not None else SQLiteBackend(path, config)
        self.registry = SchemaRegistry()

    def close(self) -> None:
        self.engine.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # --- Table manager --------------------------------------------------------------
    def create_table(self, table: Union[TableModel, Dict[str, Any]]) -> Dict[str, Any]:
        try:
            model = self._create_table(table)
        except TypedStoreError as e:
            return self._fail("create_table", e)
        return {"success": True, "table_name": model.name}

    def create_tables(self, tables: Iterable[Union[TableModel, Dict[str, Any]]],
                      atomic: bool = False) -> Dict[str, Any]:
        created: List[str] = []
        try:
            with self._batch(atomic):
                for table in tables:
                    created.append(self._create_table(table).name)
        except TypedStoreError as e:
            if atomic:
                # DDL was rolled back with the transaction; forget the models too
                for name in created:
                    self.registry.unregister(name)
                created = []
            return self._fail("create_tables", e, created=created)
        return {"success": True, "created": created}

    def drop_table(self, name: str) -> Dict[str, Any]:
        try:
            model = self._require_table(name)
            self.engine.execute(f"DROP TABLE {_quote(model.name)}")
        except TypedStoreError as e:
            return self._fail("drop_table", e)
        self.registry.unregister(model.name)
        info("table_dropped", table=model.name)
        return {"success": True, "table_name": model.name}

    # --- Row manager ----------------------------------------------------------------
    def insert_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            row_id = self._insert_row(table, row)
        except TypedStoreError as e:
            return self._fail("insert_row", e)
        return {"success": True, "id": row_id}

    def insert_rows(self, tables: Union[str, Sequence[str]], rows: Sequence[Dict[str, Any]],
                    atomic: bool = False) -> Dict[str, Any]:
        """Insert ``rows`` one by one into ``tables`` (one name for all rows, or one per row)."""
        ids: List[int] = []
        index = 0
        try:
            targets = self._batch_targets(tables, rows)
            with self._batch(atomic):
                for index, (table, row) in enumerate(zip(targets, rows)):
                    ids.append(self._insert_row(table, row))
        except TypedStoreError as e:
            return self._fail("insert_rows", e, inserted=[] if atomic else ids, index=index)
        return {"success": True, "ids": ids}

    def get_table(self, table: str, columns: Optional[Sequence[str]] = None,
                  sort: Optional[Sort] = None, limit: Optional[int] = None) -> Dict[str, Any]:
        try:
            model = self._require_table(table)
            sort_column, direction = self._parse_sort(sort)
            selected = self._resolve_columns(model, columns, sort_column)
            if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 1):
                raise InvalidLimitError(f"Limit must be a positive integer, got {limit!r}", limit=limit)
            sql = f"SELECT {', '.join(_quote(c) for c in [ID_COLUMN] + selected)} FROM {_quote(model.name)}"
            sql += f" ORDER BY {_quote(sort_column or ID_COLUMN)} {direction}"
            params: List[Any] = []
            if limit is not None:
                sql += " LIMIT ?"
                params.append(limit)
            rows = [decode_row(model, dict(r)) for r in self.engine.query(sql, params)]
        except TypedStoreError as e:
            return self._fail("get_table", e)
        return {"success": True, "rows": rows}

    def delete_row_by_id(self, table: str, row_id: int) -> Dict[str, Any]:
        try:
            model = self._require_table(table)
            where = f"FROM {_quote(model.name)} WHERE {ID_COLUMN} = ?"
            if self.engine.count(f"SELECT COUNT(*) {where}", (row_id,)) == 0:
                raise RowNotFoundError(f"No row with id {row_id} in table '{model.name}'",
                                       table=model.name, id=row_id)
            self.engine.execute(f"DELETE {where}", (row_id,))
        except TypedStoreError as e:
            return self._fail("delete_row_by_id", e)
        info("row_deleted", table=model.name, id=row_id)
        return {"success": True, "id": row_id}

    # --- Diagnostics ----------------------------------------------------------------
    def list_tables(self) -> List[str]:
        return self.registry.names()

    def get_model(self, name: str) -> Optional[TableModel]:
        return self.registry.lookup(name)

    def describe_table(self, name: str) -> Dict[str, Any]:
        try:
            model = self._require_table(name)
        except TypedStoreError as e:
            return self._fail("describe_table", e)
        columns = [{"name": ID_COLUMN, "type": "int", "required": True, "physical_type": "INTEGER PRIMARY KEY"}]
        columns += [{"name": c.name, "type": c.type, "required": c.required, "physical_type": c.physical_type}
                    for c in model.columns]
        return {"success": True, "table_name": model.name, "columns": columns}

    def count_rows(self, name: str) -> Dict[str, Any]:
        try:
            model = self._require_table(name)
            count = self.engine.count(f"SELECT COUNT(*) FROM {_quote(model.name)}")
        except TypedStoreError as e:
            return self._fail("count_rows", e)
        return {"success": True, "count": count}

    def health_check(self) -> Dict[str, Any]:
        health = self.engine.health_check() if hasattr(self.engine, "health_check") else {"ok": True}
        return {**health, "tables": self.registry.names()}

    # --- Internal -------------------------------------------------------------------
    def _create_table(self, table: Union[TableModel, Dict[str, Any]]) -> TableModel:
        model = TableModel.coerce(table)
        self._check_new_table(model)
        column_defs = [ID_COLUMN_DDL] + [c.ddl() for c in model.columns]
        self.engine.execute(f"CREATE TABLE IF NOT EXISTS {_quote(model.name)} ({', '.join(column_defs)})")
        self.registry.register(model)
        info("table_created", table=model.name, columns=model.column_names(include_id=False))
        return model

    def _check_new_table(self, model: TableModel) -> None:
        self._check_name(model.name, "table")
        if model.name in self.registry:
            raise TableAlreadyExistsError(f"Table '{model.name}' already exists", table=model.name)
        seen = set()
        for column in model.columns:
            self._check_name(column.name, "column")
            key = column.name.lower()
            if key == ID_COLUMN:
                raise ReservedColumnNameError(
                    f"Column name '{column.name}' is reserved for the row identifier",
                    table=model.name, column=column.name)
            if key in seen:
                raise DuplicateColumnNameError(
                    f"Duplicate column '{column.name}' in table '{model.name}'",
                    table=model.name, column=column.name)
            seen.add(key)

    def _check_name(self, name: str, what: str) -> None:
        if not isinstance(name, str) or not self._NAME_RE.match(name):
            raise InvalidNameError(f"Invalid {what} name {name!r}", name=name)

    def _require_table(self, name: str) -> TableModel:
        model = self.registry.lookup(name) if isinstance(name, str) else None
        if model is None:
            raise TableNotFoundError(f"Table '{name}' not found", table=name)
        return model

    def _insert_row(self, table: str, row: Dict[str, Any]) -> int:
        model = self._require_table(table)
        params = encode_row(model, validate_row(model, row))
        if model.columns:
            names = ", ".join(_quote(c.name) for c in model.columns)
            marks = ", ".join("?" for _ in model.columns)
            sql = f"INSERT INTO {_quote(model.name)} ({names}) VALUES ({marks})"
        else:
            sql = f"INSERT INTO {_quote(model.name)} DEFAULT VALUES"
        row_id = self.engine.execute(sql, params).lastrowid
        debug("row_inserted", table=model.name, id=row_id)
        return row_id

    def _batch_targets(self, tables: Union[str, Sequence[str]], rows: Sequence[Any]) -> List[str]:
        if isinstance(tables, str):
            return [tables] * len(rows)
        targets = list(tables)
        if len(targets) != len(rows):
            raise BatchMismatchError(
                f"Got {len(targets)} table names for {len(rows)} rows", tables=len(targets), rows=len(rows))
        return targets

    @contextmanager
    def _batch(self, atomic: bool) -> Iterator[None]:
        if not atomic:
            yield
            return
        with self.engine.transaction():
            yield

    def _parse_sort(self, sort: Optional[Sort]) -> Tuple[Optional[str], str]:
        if sort is None:
            return None, "ASC"
        if isinstance(sort, str):
            return sort, "ASC"
        if isinstance(sort, (tuple, list)) and len(sort) == 2 and all(isinstance(s, str) for s in sort):
            column, direction = sort
            direction = direction.upper()
            if direction not in ("ASC", "DESC"):
                raise InvalidSortError(f"Sort direction must be 'asc' or 'desc', got {sort[1]!r}")
            return column, direction
        raise InvalidSortError(f"Sort must be a column name or (column, direction), got {sort!r}")

    def _resolve_columns(self, model: TableModel, columns: Optional[Sequence[str]],
                         sort_column: Optional[str]) -> List[str]:
        """Declared column names to project after ``id``, in request order."""
        if columns is None:
            requested = model.column_names(include_id=False)
        elif isinstance(columns, str):
            requested = [columns]
        else:
            requested = list(columns)
        wanted = requested + ([sort_column] if sort_column else [])
        unknown = [c for c in wanted
                   if not isinstance(c, str) or (c.lower() != ID_COLUMN and model.column(c) is None)]
        if unknown:
            unknown = list(dict.fromkeys(str(c) for c in unknown))
            raise UnknownColumnError(
                f"Unknown column(s) {', '.join(unknown)} for table '{model.name}'. "
                f"Available columns: {', '.join(model.describe())}",
                table=model.name, columns=unknown)
        selected: List[str] = []
        for name in requested:
            if name.lower() == ID_COLUMN:
                continue
            canonical = model.column(name).name
            if canonical not in selected:
                selected.append(canonical)
        return selected

    def _fail(self, op: str, exc: TypedStoreError, **extra: Any) -> Dict[str, Any]:
        if exc.kind == "EngineError":
            error("engine_error", op=op, error=str(exc))
        else:
            warn("operation_rejected", op=op, kind=exc.kind, error=str(exc))
        return exc.to_result(**extra)
