from __future__ import annotations

"""
Stock items for one user.

Names are the join key used by sales. Matching goes through the SQL function
fold_name(), the same Python function the ledger uses in memory. Nothing
enforces uniqueness, so a quantity adjustment touches every row with that
name.
"""

import json
import sqlite3
from datetime import datetime
from typing import List

from ...modules.ledger.models import CostHistoryEntry, StockItem, fold_name
from .base import ScopedRepo, from_iso, to_iso

_COLUMNS = (
    "item_id, name, quantity, CAST(cost_price AS REAL) AS cost_price, "
    "CAST(selling_price AS REAL) AS selling_price, low_stock_threshold, "
    "last_updated, image_url, cost_history"
)


def _dump_history(history) -> str:
    return json.dumps([{"price": h.price, "date": to_iso(h.date)} for h in history])


def _load_history(raw: str | None) -> tuple[CostHistoryEntry, ...]:
    if not raw:
        return ()
    return tuple(
        CostHistoryEntry(price=float(h["price"]), date=from_iso(h["date"]))
        for h in json.loads(raw)
    )


class StockRepo(ScopedRepo):
    def __init__(self, conn: sqlite3.Connection, user_id: int):
        super().__init__(conn, user_id)
        conn.create_function("fold_name", 1, fold_name, deterministic=True)

    @staticmethod
    def _from_row(r: sqlite3.Row) -> StockItem:
        return StockItem(
            item_id=r["item_id"],
            name=r["name"],
            quantity=int(r["quantity"]),
            cost_price=float(r["cost_price"]),
            selling_price=float(r["selling_price"]),
            low_stock_threshold=r["low_stock_threshold"],
            last_updated=from_iso(r["last_updated"]),
            image_url=r["image_url"],
            cost_history=_load_history(r["cost_history"]),
        )

    def _validate(self, item: StockItem) -> None:
        self._ensure_non_empty(item.name, "Name")
        self._ensure_non_negative(item.cost_price, "Cost price")
        self._ensure_non_negative(item.selling_price, "Selling price")

    def list(self) -> List[StockItem]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM stock WHERE user_id=? ORDER BY last_updated DESC, item_id",
            (self.user_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def get(self, item_id: str) -> StockItem | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM stock WHERE user_id=? AND item_id=?",
            (self.user_id, item_id),
        ).fetchone()
        return None if r is None else self._from_row(r)

    def find_by_name(self, name: str) -> List[StockItem]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM stock WHERE user_id=? AND fold_name(name)=fold_name(?)",
            (self.user_id, name),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def create(self, item: StockItem) -> None:
        self._validate(item)
        self.conn.execute(
            """
            INSERT INTO stock (
                item_id, user_id, name, quantity, cost_price, selling_price,
                low_stock_threshold, last_updated, image_url, cost_history
            ) VALUES (?,?,?,?,?,?,?,?,?,?)
            """,
            (
                item.item_id,
                self.user_id,
                item.name.strip(),
                int(item.quantity),
                float(item.cost_price),
                float(item.selling_price),
                item.low_stock_threshold,
                to_iso(item.last_updated),
                item.image_url,
                _dump_history(item.cost_history),
            ),
        )

    def update(self, item: StockItem) -> None:
        self._validate(item)
        cur = self.conn.execute(
            """
            UPDATE stock
               SET name=?, quantity=?, cost_price=?, selling_price=?,
                   low_stock_threshold=?, last_updated=?, image_url=?, cost_history=?
             WHERE user_id=? AND item_id=?
            """,
            (
                item.name.strip(),
                int(item.quantity),
                float(item.cost_price),
                float(item.selling_price),
                item.low_stock_threshold,
                to_iso(item.last_updated),
                item.image_url,
                _dump_history(item.cost_history),
                self.user_id,
                item.item_id,
            ),
        )
        self._require_row(cur, "Stock item", item.item_id)

    def adjust_quantity(self, name: str, delta: int, when: datetime) -> int:
        """
        Add `delta` to the quantity of every item whose fold_name() matches
        `name` and stamp last_updated. Relative update, so concurrent writers
        do not lose each other's changes. Returns the number of rows touched.
        """
        cur = self.conn.execute(
            "UPDATE stock SET quantity = quantity + ?, last_updated = ? "
            "WHERE user_id=? AND fold_name(name) = fold_name(?)",
            (int(delta), to_iso(when), self.user_id, name),
        )
        return cur.rowcount

    def delete(self, item_id: str) -> None:
        cur = self.conn.execute(
            "DELETE FROM stock WHERE user_id=? AND item_id=?", (self.user_id, item_id)
        )
        self._require_row(cur, "Stock item", item_id)
