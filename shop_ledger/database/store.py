from __future__ import annotations

"""
SqliteLedgerStore: the persistence collaborator used by the ledger engine.

Any object with the same shape can stand in for it:
  - .sales / .stock / .debts / .expenses, each exposing list(), create(),
    update() (not sales), delete(id)
  - .stock.adjust_quantity(name, delta, when) and .debts.toggle_paid(id)
  - .transaction(): context manager committing on success, rolling back on error
"""

import sqlite3
from contextlib import contextmanager

from . import immediate_tx
from .repositories.debts_repo import DebtsRepo
from .repositories.expenses_repo import ExpensesRepo
from .repositories.sales_repo import SalesRepo
from .repositories.settings_repo import SettingsRepo
from .repositories.stock_repo import StockRepo


class SqliteLedgerStore:
    def __init__(self, conn: sqlite3.Connection, user_id: int):
        self.conn = conn
        self.user_id = int(user_id)
        self.sales = SalesRepo(conn, user_id)
        self.stock = StockRepo(conn, user_id)
        self.debts = DebtsRepo(conn, user_id)
        self.expenses = ExpensesRepo(conn, user_id)
        self.settings = SettingsRepo(conn, user_id)

    @contextmanager
    def transaction(self):
        with immediate_tx(self.conn):
            yield self
