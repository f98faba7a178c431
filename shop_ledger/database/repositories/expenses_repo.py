from __future__ import annotations

"""
Repository for expenses.

Only the anchor date and the frequency are stored; next due dates are
projected on read by modules.ledger.recurrence and never written back.
An unrecognised frequency value read from disk is kept as 'none'.
"""

import sqlite3
from typing import List

from ...modules.ledger.models import ExpenseRecord, Frequency
from .base import DomainError, ScopedRepo, from_iso, to_iso

_COLUMNS = "expense_id, category, CAST(amount AS REAL) AS amount, description, date, frequency"


class ExpensesRepo(ScopedRepo):

    @staticmethod
    def _from_row(r: sqlite3.Row) -> ExpenseRecord:
        return ExpenseRecord(
            expense_id=r["expense_id"],
            category=r["category"],
            amount=float(r["amount"]),
            description=r["description"],
            date=from_iso(r["date"]),
            frequency=Frequency.parse(r["frequency"]) or Frequency.NONE,
        )

    def _validate(self, expense: ExpenseRecord) -> Frequency:
        self._ensure_non_empty(expense.category, "Category")
        self._ensure_non_negative(expense.amount, "Amount")
        freq = Frequency.parse(expense.frequency)
        if freq is None:
            raise DomainError(f"Unknown frequency {expense.frequency!r}.")
        return freq

    def list(self) -> List[ExpenseRecord]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM expenses WHERE user_id=? ORDER BY date DESC, expense_id",
            (self.user_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def get(self, expense_id: str) -> ExpenseRecord | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM expenses WHERE user_id=? AND expense_id=?",
            (self.user_id, expense_id),
        ).fetchone()
        return None if r is None else self._from_row(r)

    def create(self, expense: ExpenseRecord) -> None:
        freq = self._validate(expense)
        self.conn.execute(
            """
            INSERT INTO expenses (
                expense_id, user_id, category, amount, description, date, frequency
            ) VALUES (?,?,?,?,?,?,?)
            """,
            (
                expense.expense_id,
                self.user_id,
                expense.category.strip(),
                float(expense.amount),
                expense.description or "",
                to_iso(expense.date),
                freq.value,
            ),
        )

    def update(self, expense: ExpenseRecord) -> None:
        freq = self._validate(expense)
        cur = self.conn.execute(
            """
            UPDATE expenses
               SET category=?, amount=?, description=?, date=?, frequency=?
             WHERE user_id=? AND expense_id=?
            """,
            (
                expense.category.strip(),
                float(expense.amount),
                expense.description or "",
                to_iso(expense.date),
                freq.value,
                self.user_id,
                expense.expense_id,
            ),
        )
        self._require_row(cur, "Expense", expense.expense_id)

    def delete(self, expense_id: str) -> None:
        cur = self.conn.execute(
            "DELETE FROM expenses WHERE user_id=? AND expense_id=?",
            (self.user_id, expense_id),
        )
        self._require_row(cur, "Expense", expense_id)
