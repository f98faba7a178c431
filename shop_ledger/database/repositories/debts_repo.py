from __future__ import annotations

import sqlite3
from typing import List

from ...modules.ledger.models import DebtRecord
from .base import ScopedRepo, from_iso, to_iso

_COLUMNS = (
    "debt_id, debtor_name, phone_number, CAST(amount AS REAL) AS amount, "
    "description, is_paid, date"
)


class DebtsRepo(ScopedRepo):
    """
    Customer debts for one user. Debts created from credit sales and debts
    entered by hand share this table and are indistinguishable.
    """

    @staticmethod
    def _from_row(r: sqlite3.Row) -> DebtRecord:
        return DebtRecord(
            debt_id=r["debt_id"],
            debtor_name=r["debtor_name"],
            phone_number=r["phone_number"],
            amount=float(r["amount"]),
            description=r["description"],
            is_paid=bool(r["is_paid"]),
            date=from_iso(r["date"]),
        )

    def _validate(self, debt: DebtRecord) -> None:
        self._ensure_non_empty(debt.debtor_name, "Debtor name")
        self._ensure_non_negative(debt.amount, "Amount")

    def list(self) -> List[DebtRecord]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM debts WHERE user_id=? ORDER BY date DESC, debt_id",
            (self.user_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def get(self, debt_id: str) -> DebtRecord | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM debts WHERE user_id=? AND debt_id=?",
            (self.user_id, debt_id),
        ).fetchone()
        return None if r is None else self._from_row(r)

    def create(self, debt: DebtRecord) -> None:
        self._validate(debt)
        self.conn.execute(
            """
            INSERT INTO debts (
                debt_id, user_id, debtor_name, phone_number, amount,
                description, is_paid, date
            ) VALUES (?,?,?,?,?,?,?,?)
            """,
            (
                debt.debt_id,
                self.user_id,
                debt.debtor_name.strip(),
                debt.phone_number or "",
                float(debt.amount),
                debt.description or "",
                1 if debt.is_paid else 0,
                to_iso(debt.date),
            ),
        )

    def update(self, debt: DebtRecord) -> None:
        self._validate(debt)
        cur = self.conn.execute(
            """
            UPDATE debts
               SET debtor_name=?, phone_number=?, amount=?, description=?, is_paid=?
             WHERE user_id=? AND debt_id=?
            """,
            (
                debt.debtor_name.strip(),
                debt.phone_number or "",
                float(debt.amount),
                debt.description or "",
                1 if debt.is_paid else 0,
                self.user_id,
                debt.debt_id,
            ),
        )
        self._require_row(cur, "Debt", debt.debt_id)

    def toggle_paid(self, debt_id: str) -> None:
        cur = self.conn.execute(
            "UPDATE debts SET is_paid = 1 - is_paid WHERE user_id=? AND debt_id=?",
            (self.user_id, debt_id),
        )
        self._require_row(cur, "Debt", debt_id)

    def delete(self, debt_id: str) -> None:
        cur = self.conn.execute(
            "DELETE FROM debts WHERE user_id=? AND debt_id=?", (self.user_id, debt_id)
        )
        self._require_row(cur, "Debt", debt_id)
