# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures); run offscreen
# - Every test gets its own in-memory SQLite DB with the schema applied
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON
# - Time is a FixedClock so recurrence/alerts are deterministic
# ---------------------------------------------------------------------

from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from datetime import datetime, timedelta

import pytest

from shop_ledger.constants import DEFAULT_MANAGER_PIN
from shop_ledger.database import get_connection
from shop_ledger.database.store import SqliteLedgerStore
from shop_ledger.modules.ledger.coordinator import LedgerCoordinator
from shop_ledger.modules.ledger.models import StockItem

NOW = datetime(2024, 5, 15, 12, 0, 0)
PIN = DEFAULT_MANAGER_PIN


class FixedClock:
    """Callable clock the tests can move by hand."""

    def __init__(self, at: datetime = NOW):
        self.at = at

    def __call__(self) -> datetime:
        return self.at

    def advance(self, **kw) -> datetime:
        self.at = self.at + timedelta(**kw)
        return self.at


@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


@pytest.fixture()
def conn():
    con = get_connection(":memory:")
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def store(conn) -> SqliteLedgerStore:
    return SqliteLedgerStore(conn, user_id=1)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def ledger(qapp, store, clock) -> LedgerCoordinator:
    led = LedgerCoordinator(store, clock=clock)
    led.load()
    return led


def make_stock(name="Widget", quantity=10, cost_price=10.0, selling_price=15.0,
               threshold=5, **kw) -> StockItem:
    return StockItem(
        name=name,
        quantity=quantity,
        cost_price=cost_price,
        selling_price=selling_price,
        low_stock_threshold=threshold,
        last_updated=kw.pop("last_updated", NOW - timedelta(days=30)),
        **kw,
    )


def assert_in_sync(ledger: LedgerCoordinator, store: SqliteLedgerStore) -> None:
    """The in-memory lists hold exactly what the store reads back (order aside)."""
    def by(key):
        return lambda rows: sorted(rows, key=lambda r: getattr(r, key))

    assert by("sale_id")(ledger.sales) == by("sale_id")(store.sales.list())
    assert by("item_id")(ledger.stock) == by("item_id")(store.stock.list())
    assert by("debt_id")(ledger.debts) == by("debt_id")(store.debts.list())
    assert by("expense_id")(ledger.expenses) == by("expense_id")(store.expenses.list())
