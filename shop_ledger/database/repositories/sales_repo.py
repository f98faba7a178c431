from __future__ import annotations

import sqlite3
from typing import List

from ...modules.ledger.models import SaleRecord
from .base import ScopedRepo, from_iso, to_iso

_COLUMNS = (
    "sale_id, item_name, category, quantity, "
    "CAST(unit_price AS REAL) AS unit_price, CAST(unit_cost AS REAL) AS unit_cost, "
    "date, is_on_credit, CAST(paid_amount AS REAL) AS paid_amount, "
    "CAST(balance AS REAL) AS balance, customer_name, customer_phone"
)


class SalesRepo(ScopedRepo):
    """
    Sales for one user. Sales are immutable: there is no update().
    """

    @staticmethod
    def _from_row(r: sqlite3.Row) -> SaleRecord:
        return SaleRecord(
            sale_id=r["sale_id"],
            item_name=r["item_name"],
            category=r["category"],
            quantity=int(r["quantity"]),
            unit_price=float(r["unit_price"]),
            unit_cost=None if r["unit_cost"] is None else float(r["unit_cost"]),
            date=from_iso(r["date"]),
            is_on_credit=bool(r["is_on_credit"]),
            paid_amount=r["paid_amount"],
            balance=r["balance"],
            customer_name=r["customer_name"],
            customer_phone=r["customer_phone"],
        )

    def list(self) -> List[SaleRecord]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM sales WHERE user_id=? ORDER BY date DESC, sale_id",
            (self.user_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def get(self, sale_id: str) -> SaleRecord | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM sales WHERE user_id=? AND sale_id=?",
            (self.user_id, sale_id),
        ).fetchone()
        return None if r is None else self._from_row(r)

    def create(self, sale: SaleRecord) -> None:
        self._ensure_non_empty(sale.item_name, "Item name")
        self._ensure_non_negative(sale.unit_price, "Price")
        self.conn.execute(
            """
            INSERT INTO sales (
                sale_id, user_id, item_name, category, quantity, unit_price,
                unit_cost, date, is_on_credit, paid_amount, balance,
                customer_name, customer_phone
            ) VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?)
            """,
            (
                sale.sale_id,
                self.user_id,
                sale.item_name.strip(),
                sale.category or "",
                int(sale.quantity),
                float(sale.unit_price),
                sale.unit_cost,
                to_iso(sale.date),
                1 if sale.is_on_credit else 0,
                sale.paid_amount,
                sale.balance,
                sale.customer_name,
                sale.customer_phone,
            ),
        )

    def delete(self, sale_id: str) -> None:
        cur = self.conn.execute(
            "DELETE FROM sales WHERE user_id=? AND sale_id=?", (self.user_id, sale_id)
        )
        self._require_row(cur, "Sale", sale_id)
