from __future__ import annotations

"""
Shared plumbing for the ledger repositories.

Conventions:
- Every repository is bound to one connection and one user_id; every query
  filters on user_id.
- Repositories never commit. The caller (LedgerStore.transaction()) owns the
  transaction boundary.
- Timestamps are stored as ISO-8601 text with millisecond precision.
"""

import sqlite3
from datetime import datetime

from ...utils.validators import is_non_negative_number


class DomainError(Exception):
    """Domain-level error raised for validation issues."""
    pass


def to_iso(dt: datetime) -> str:
    return dt.isoformat(timespec="milliseconds")


def from_iso(value: str) -> datetime:
    return datetime.fromisoformat(value)


class ScopedRepo:
    def __init__(self, conn: sqlite3.Connection, user_id: int):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn
        self.user_id = int(user_id)

    @staticmethod
    def _ensure_non_empty(value: str | None, field_label: str) -> None:
        if value is None or str(value).strip() == "":
            raise DomainError(f"{field_label} cannot be empty.")

    @staticmethod
    def _ensure_non_negative(value, field_label: str) -> None:
        if not is_non_negative_number(value):
            raise DomainError(f"{field_label} must be a non-negative number.")

    def _require_row(self, cur: sqlite3.Cursor, what: str, key: str) -> None:
        if cur.rowcount == 0:
            raise DomainError(f"{what} {key!r} not found.")
