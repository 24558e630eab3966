#!/usr/bin/env python3
"""Smoke test for the typed table round trip.

Checks:
  * A table declaring every logical type can be created
  * A two-row batch insert succeeds and hands back sequential ids
  * Rows read back decode to their original Python types (JSON, ISO dates)
  * A row missing a required column is rejected before reaching SQLite

Usage:
  python scripts/smoke_test.py              # in-memory database
  python scripts/smoke_test.py ./demo.db    # file database
"""
import json, sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from typedstore import Database  # noqa: E402

failures = []

def check(cond, msg):
    if not cond:
        failures.append(msg)

db_path = sys.argv[1] if len(sys.argv) > 1 else ":memory:"
stamp = datetime(2024, 5, 17, 9, 30, 0)

with Database(db_path) as db:
    created = db.create_table({
        "name": "smoke",
        "columns": [
            {"name": "boolTest", "type": "boolean", "required": True},
            {"name": "arrayTest", "type": "array"},
            {"name": "dateTest", "type": "date"},
            {"name": "objectTest", "type": "object"},
            {"name": "stringTest", "type": "string"},
            {"name": "intTest", "type": "int"},
            {"name": "realTest", "type": "real"},
        ],
    })
    check(created["success"], f"create_table failed: {created.get('error')}")

    inserted = db.insert_rows("smoke", [
        {
            "boolTest": True,
            "arrayTest": [1, 2, 3],
            "dateTest": stamp,
            "objectTest": {"hello": "world"},
            "stringTest": "'''''\"`LSDKFJLKJDFS123",
            "intTest": 1,
            "realTest": 2.56,
        },
        {
            "boolTest": False,
            "dateTest": stamp,
            "objectTest": {"hello": "monde"},
            "stringTest": "lllllllDFS123",
            "intTest": 9,
            "realTest": 6.18,
        },
    ])
    check(inserted["success"], f"insert_rows failed: {inserted.get('error')}")

    rejected = db.insert_row("smoke", {"intTest": 3})
    check(rejected.get("kind") == "MissingRequiredColumn", f"missing column not rejected: {rejected}")

    table = db.get_table("smoke")
    rows = table.get("rows", [])
    check(len(rows) == 2, f"expected 2 rows, got {len(rows)}")
    if rows:
        first = rows[0]
        check(first["arrayTest"] == [1, 2, 3], f"array round trip: {first['arrayTest']!r}")
        check(first["objectTest"] == {"hello": "world"}, f"object round trip: {first['objectTest']!r}")
        check(first["dateTest"] == stamp, f"date round trip: {first['dateTest']!r}")
        check(first["boolTest"] is True, f"boolean round trip: {first['boolTest']!r}")
    health = db.health_check()

if failures:
    print(json.dumps({'success': False, 'failures': failures}))
    sys.exit(2)
print(json.dumps({'success': True, 'ids': inserted["ids"], 'tables': health["tables"]}))
