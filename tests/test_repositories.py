# tests/test_repositories.py
# Repositories never commit; the store's transaction() owns the boundary.

from datetime import timedelta

import pytest

from shop_ledger.database.repositories.base import DomainError
from shop_ledger.database.store import SqliteLedgerStore
from shop_ledger.modules.ledger.models import (
    CostHistoryEntry,
    DebtRecord,
    ExpenseRecord,
    Frequency,
    SaleRecord,
)

from conftest import NOW, make_stock


def _sale(**kw):
    base = dict(item_name="Widget", category="General", quantity=2, unit_price=15.0, date=NOW)
    base.update(kw)
    return SaleRecord(**base)


def test_rows_are_scoped_to_their_user(conn, store):
    other = SqliteLedgerStore(conn, user_id=2)
    with store.transaction():
        store.stock.create(make_stock("Widget"))
        store.sales.create(_sale())
    assert other.stock.list() == []
    assert other.sales.list() == []
    assert other.stock.adjust_quantity("widget", -1, NOW) == 0
    assert store.stock.list()[0].quantity == 10


def test_sale_round_trip(store):
    sale = _sale(unit_cost=9.5, is_on_credit=True, paid_amount=10.0, balance=20.0,
                 customer_name="Jane", customer_phone="555")
    with store.transaction():
        store.sales.create(sale)
    assert store.sales.get(sale.sale_id) == sale


def test_sales_listed_newest_first(store):
    old, new = _sale(date=NOW - timedelta(days=1)), _sale()
    with store.transaction():
        store.sales.create(old)
        store.sales.create(new)
    assert [s.sale_id for s in store.sales.list()] == [new.sale_id, old.sale_id]


def test_stock_cost_history_round_trip(store):
    history = (
        CostHistoryEntry(price=10.0, date=NOW - timedelta(days=3)),
        CostHistoryEntry(price=12.5, date=NOW),
    )
    item = make_stock("Widget", cost_price=12.5, cost_history=history, threshold=None)
    with store.transaction():
        store.stock.create(item)
    loaded = store.stock.get(item.item_id)
    assert loaded.cost_history == history
    assert loaded.low_stock_threshold is None
    assert loaded == item


def test_adjust_quantity_is_relative_and_case_insensitive(store):
    a, b = make_stock("Widget", quantity=10), make_stock("WIDGET", quantity=3)
    c = make_stock("Gadget", quantity=4)
    with store.transaction():
        for item in (a, b, c):
            store.stock.create(item)
        touched = store.stock.adjust_quantity("wIdGeT", -4, NOW)
    assert touched == 2
    assert store.stock.get(a.item_id).quantity == 6
    assert store.stock.get(b.item_id).quantity == -1
    assert store.stock.get(b.item_id).last_updated == NOW
    assert store.stock.get(c.item_id).quantity == 4
    assert len(store.stock.find_by_name("widget")) == 2


def test_name_matching_strips_and_casefolds(store):
    cafe, street = make_stock("CAFÉ", quantity=5), make_stock("Straße", quantity=5)
    with store.transaction():
        store.stock.create(cafe)
        store.stock.create(street)
        assert store.stock.adjust_quantity("  café ", -2, NOW) == 1
        assert store.stock.adjust_quantity("STRASSE", -1, NOW) == 1
        assert store.stock.adjust_quantity("cafe", -1, NOW) == 0
    assert store.stock.get(cafe.item_id).quantity == 3
    assert store.stock.get(street.item_id).quantity == 4
    assert [s.item_id for s in store.stock.find_by_name(" Café")] == [cafe.item_id]


def test_update_and_delete_of_missing_rows_raise(store):
    with pytest.raises(DomainError):
        store.stock.update(make_stock("Ghost"))
    with pytest.raises(DomainError):
        store.sales.delete("nope")
    with pytest.raises(DomainError):
        store.debts.toggle_paid("nope")
    with pytest.raises(DomainError):
        store.expenses.delete("nope")


def test_validation_errors(store):
    with pytest.raises(DomainError):
        store.stock.create(make_stock("   "))
    with pytest.raises(DomainError):
        store.debts.create(DebtRecord(debtor_name="Tom", phone_number="", amount=-1,
                                      description="", date=NOW))
    with pytest.raises(DomainError):
        store.expenses.create(ExpenseRecord(category="Rent", amount=1.0, description="",
                                            date=NOW, frequency="fortnightly"))


def test_unknown_frequency_on_disk_reads_as_none(conn, store):
    exp = ExpenseRecord(category="Rent", amount=1.0, description="", date=NOW, frequency="weekly")
    with store.transaction():
        store.expenses.create(exp)
        conn.execute("UPDATE expenses SET frequency='fortnightly' WHERE expense_id=?", (exp.expense_id,))
    assert store.expenses.get(exp.expense_id).frequency is Frequency.NONE


def test_toggle_paid_flips_both_ways(store):
    debt = DebtRecord(debtor_name="Tom", phone_number="", amount=5.0, description="", date=NOW)
    with store.transaction():
        store.debts.create(debt)
        store.debts.toggle_paid(debt.debt_id)
    assert store.debts.get(debt.debt_id).is_paid is True
    with store.transaction():
        store.debts.toggle_paid(debt.debt_id)
    assert store.debts.get(debt.debt_id).is_paid is False


def test_transaction_rolls_back_on_error(store):
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.sales.create(_sale())
            store.stock.create(make_stock())
            raise RuntimeError("boom")
    assert store.sales.list() == []
    assert store.stock.list() == []

    # and the connection is usable afterwards
    with store.transaction():
        store.sales.create(_sale())
    assert len(store.sales.list()) == 1


def test_settings_upsert(conn, store):
    assert store.settings.get("currency") is None
    assert store.settings.get("currency", "$") == "$"
    with store.transaction():
        store.settings.set("currency", "€")
        store.settings.set("currency", "KSh")
        store.settings.set("manager_pin", "4321")
    assert store.settings.all() == {"currency": "KSh", "manager_pin": "4321"}
    assert SqliteLedgerStore(conn, user_id=2).settings.all() == {}
