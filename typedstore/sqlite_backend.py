"""SQLite engine used by ``Database``.

    - One lazily opened connection in autocommit mode; every statement commits
      on its own unless a ``transaction()`` block is open
    - Environment driven tuning with clamping + sanity logging
    - Health check helper + optional integrity_check (TYPEDSTORE_VERIFY_ON_CONNECT=1)
    - sqlite3 errors re-raised as EngineError with the SQLite message intact
"""
from __future__ import annotations
import sqlite3, os, threading
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .errors import EngineError
from .logging_util import warn, debug

MAX_CACHE_KIB = 512 * 1024        # 512 MiB upper clamp
MIN_CACHE_KIB = 16                # SQLite minimum practical
DEFAULT_CACHE_KIB = 8 * 1024      # 8 MiB
MAX_BUSY_TIMEOUT_MS = 600_000
DEFAULT_BUSY_TIMEOUT_MS = 5000
MEMORY_PATHS = ("", ":memory:")

@dataclass
class BackendConfig:
    cache_kib: int = DEFAULT_CACHE_KIB
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS
    journal_wal: bool = False
    verify_on_connect: bool = False

    @classmethod
    def from_env(cls) -> "BackendConfig":
        def _int(name: str, default: int) -> int:
            raw = os.environ.get(name)
            if raw is None:
                return default
            try:
                return int(raw)
            except ValueError:
                warn("invalid_env_int", key=name, value=raw, default=default)
                return default
        cache_kib = _int("TYPEDSTORE_CACHE_KIB", DEFAULT_CACHE_KIB)
        busy_ms = _int("TYPEDSTORE_BUSY_TIMEOUT_MS", DEFAULT_BUSY_TIMEOUT_MS)
        wal = os.environ.get("TYPEDSTORE_JOURNAL_WAL", "0") == "1"
        verify = os.environ.get("TYPEDSTORE_VERIFY_ON_CONNECT", "0") == "1"
        # Clamp
        adjusted = {}
        if cache_kib < MIN_CACHE_KIB or cache_kib > MAX_CACHE_KIB:
            adjusted["cache_kib"] = cache_kib
            cache_kib = min(MAX_CACHE_KIB, max(MIN_CACHE_KIB, cache_kib))
        if busy_ms < 0 or busy_ms > MAX_BUSY_TIMEOUT_MS:
            adjusted["busy_timeout_ms"] = busy_ms
            busy_ms = min(MAX_BUSY_TIMEOUT_MS, max(0, busy_ms))
        if adjusted:
            final_values = {"cache_kib": cache_kib, "busy_timeout_ms": busy_ms}
            warn("backend_config_clamped", original=adjusted, clamped=final_values)
        return cls(cache_kib=cache_kib, busy_timeout_ms=busy_ms, journal_wal=wal, verify_on_connect=verify)


class SQLiteBackend:
    """SQLite engine over a single connection.

    Responsibilities:
      - Open the connection on first use and apply tuned pragmas
      - Serialise statement execution on that connection
      - Translate sqlite3 failures into EngineError
      - Health check utility
    """
    def __init__(self, path: str, config: Optional[BackendConfig] = None):
        if path not in MEMORY_PATHS and os.path.isdir(path):  # directory misuse
            raise ValueError(f"Path points to a directory, expected file: {path}")
        self.path = path
        self.config = config or BackendConfig.from_env()
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def in_memory(self) -> bool:
        return self.path in MEMORY_PATHS

    # --- Public API -----------------------------------------------------------------
    def connect(self) -> sqlite3.Connection:
        """Return the shared connection, opening and configuring it on first call."""
        with self._lock:
            if self._conn is not None:
                return self._conn
            try:
                # autocommit; explicit BEGIN/COMMIT only inside transaction()
                conn = sqlite3.connect(self.path, isolation_level=None, check_same_thread=False)
            except sqlite3.Error as e:
                raise EngineError(str(e), path=self.path) from e
            conn.row_factory = sqlite3.Row
            self._apply_pragmas(conn)
            if self.config.verify_on_connect:
                try:
                    res = conn.execute("PRAGMA integrity_check").fetchone()[0]
                    if res != "ok":
                        warn("integrity_check_failed", path=self.path, result=res)
                except sqlite3.Error as e:  # pragma: no cover - unexpected
                    warn("integrity_check_error", error=str(e))
            self._conn = conn
            return conn

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        with self._lock:
            conn = self.connect()
            try:
                return conn.execute(sql, tuple(params))
            except (sqlite3.Error, OverflowError) as e:
                # OverflowError: bound int outside SQLite's 64-bit range
                raise EngineError(str(e)) from e

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        with self._lock:
            conn = self.connect()
            try:
                return conn.execute(sql, tuple(params)).fetchall()
            except (sqlite3.Error, OverflowError) as e:
                # OverflowError: bound int outside SQLite's 64-bit range
                raise EngineError(str(e)) from e

    def count(self, sql: str, params: Sequence[Any] = ()) -> int:
        rows = self.query(sql, params)
        return int(rows[0][0]) if rows else 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Hold the connection for a BEGIN ... COMMIT block; ROLLBACK if the block raises."""
        with self._lock:
            self.execute("BEGIN")
            try:
                yield
            except BaseException:
                try:
                    self.execute("ROLLBACK")
                except EngineError as e:
                    warn("rollback_failed", path=self.path, error=str(e))
                raise
            self.execute("COMMIT")

    def health_check(self) -> Dict[str, Any]:
        """Return current core pragma values and basic status."""
        try:
            conn = self.connect()
        except EngineError as e:
            return {"ok": False, "error": str(e)}
        with self._lock:
            try:
                return {
                    "ok": True,
                    "path": self.path,
                    "in_memory": self.in_memory,
                    "foreign_keys": conn.execute("PRAGMA foreign_keys").fetchone()[0],
                    "journal_mode": conn.execute("PRAGMA journal_mode").fetchone()[0],
                    "synchronous": conn.execute("PRAGMA synchronous").fetchone()[0],
                    "cache_size": conn.execute("PRAGMA cache_size").fetchone()[0],
                    "busy_timeout": conn.execute("PRAGMA busy_timeout").fetchone()[0],
                }
            except sqlite3.Error as e:
                return {"ok": False, "path": self.path, "error": str(e)}

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            try:
                self._conn.close()
            except sqlite3.Error as e:
                warn("close_failed", path=self.path, error=str(e))
            self._conn = None

    # --- Internal -------------------------------------------------------------------
    def _apply_pragmas(self, conn: sqlite3.Connection) -> None:
        pragmas = [
            ("foreign_keys=ON", "foreign_keys"),
            (f"busy_timeout={self.config.busy_timeout_ms}", "busy_timeout"),
            (f"cache_size=-{self.config.cache_kib}", "cache_size"),  # negative => KiB
            ("trusted_schema=OFF", "trusted_schema"),
        ]
        for p, tag in pragmas:
            try:
                conn.execute(f"PRAGMA {p}")
            except sqlite3.Error as e:
                warn("pragma_failed", pragma=p, tag=tag, path=self.path, error=str(e))
        if self.config.journal_wal and not self.in_memory:
            try:
                jm = conn.execute("PRAGMA journal_mode=WAL").fetchone()[0]
                if jm.lower() != "wal":
                    warn("journal_mode_unexpected", got=jm, path=self.path)
            except sqlite3.Error as e:
                warn("pragma_failed", pragma="journal_mode=WAL", path=self.path, error=str(e))
        debug("connection_opened", path=self.path, wal=self.config.journal_wal and not self.in_memory)


def cli_dump_config():  # pragma: no cover - thin CLI wrapper
    """CLI helper: print resolved BackendConfig + health_check JSON."""
    import argparse, json
    ap = argparse.ArgumentParser(description='Dump backend config and health info')
    ap.add_argument('db', help='Path to SQLite database (or :memory:)')
    args = ap.parse_args()
    be = SQLiteBackend(args.db)
    try:
        out = {'config': asdict(be.config), 'health_check': be.health_check()}
    finally:
        be.close()
    print(json.dumps(out, indent=2))

if __name__ == '__main__':  # pragma: no cover
    cli_dump_config()
