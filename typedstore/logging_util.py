"""Lightweight structured logging helper.

Emits one JSON object per line to stderr, tagged "logger":"typedstore".
Threshold comes from TYPEDSTORE_LOG_LEVEL, read on every call.

Events emitted by the package:
  INFO  table_created, table_dropped, row_deleted
  DEBUG row_inserted, connection_opened
  WARN  operation_rejected (validation or lookup failure returned to the caller),
        invalid_env_int, backend_config_clamped, pragma_failed, rollback_failed
  ERROR engine_error (SQLite refused a statement)
"""
from __future__ import annotations
import os, sys, json, time, threading

_lock = threading.Lock()
LEVEL_ORDER = ["DEBUG","INFO","WARN","ERROR"]
DEFAULT_LEVEL = "INFO"

def current_level() -> str:
    level = os.environ.get("TYPEDSTORE_LOG_LEVEL", DEFAULT_LEVEL).upper()
    return "WARN" if level == "WARNING" else level

def _should(level: str) -> bool:
    try:
        return LEVEL_ORDER.index(level) >= LEVEL_ORDER.index(current_level())
    except ValueError:
        return True

def _default(value):
    # datetimes and other odd field values still produce a log line
    return str(value)

def log(level: str, event: str, **fields):
    level = level.upper()
    if not _should(level):
        return
    record = {
        "ts": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime()),
        "level": level,
        "logger": "typedstore",
        "event": event,
    }
    record.update(fields)
    line = json.dumps(record, separators=(',',':'), default=_default)
    with _lock:
        sys.stderr.write(line + "\n")
        sys.stderr.flush()

def debug(event: str, **fields): log("DEBUG", event, **fields)
def info(event: str, **fields): log("INFO", event, **fields)
def warn(event: str, **fields): log("WARN", event, **fields)
def error(event: str, **fields): log("ERROR", event, **fields)
