"""Typed tables over an embedded SQLite database.

Single source of truth for the package version so that code, tests, and
scripts can import without duplicating literals.
"""

PACKAGE_VERSION = "0.1.0"  # Keep in sync with pyproject version.

from .types import ID_COLUMN, ColumnModel, TableModel  # noqa: E402
from .database import Database  # noqa: E402

__all__ = ["PACKAGE_VERSION", "ID_COLUMN", "ColumnModel", "TableModel", "Database"]
