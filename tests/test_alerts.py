from __future__ import annotations

from datetime import timedelta

from shop_ledger.modules.ledger.alerts import AlertAggregator, LedgerAlerts, compute_alerts
from shop_ledger.modules.ledger.models import DebtRecord, ExpenseRecord, Frequency

from conftest import NOW, FixedClock, make_stock


def _debt(name="Jane", paid=False) -> DebtRecord:
    return DebtRecord(debtor_name=name, phone_number="", amount=10.0, description="", date=NOW, is_paid=paid)


def _expense(days_ago: int, frequency) -> ExpenseRecord:
    return ExpenseRecord(
        category="Utilities", amount=40.0, description="",
        date=NOW - timedelta(days=days_ago), frequency=frequency,
    )


def test_low_stock_boundary_is_inclusive():
    at_threshold = make_stock("A", quantity=5, threshold=5)
    above = make_stock("B", quantity=6, threshold=5)
    alerts = compute_alerts([at_threshold, above], [], [], now=NOW)
    assert alerts.low_stock == (at_threshold,)
    assert alerts.low_stock_count == 1


def test_missing_threshold_defaults_to_five_but_zero_is_kept():
    no_threshold = make_stock("A", quantity=5, threshold=None)
    zero_threshold_empty = make_stock("B", quantity=0, threshold=0)
    zero_threshold_one = make_stock("C", quantity=1, threshold=0)
    oversold = make_stock("D", quantity=-3, threshold=2)
    alerts = compute_alerts([no_threshold, zero_threshold_empty, zero_threshold_one, oversold], [], [], now=NOW)
    assert [s.name for s in alerts.low_stock] == ["A", "B", "D"]


def test_unpaid_debts_only():
    open_debt, settled = _debt("Jane"), _debt("Tom", paid=True)
    alerts = compute_alerts([], [open_debt, settled], [], now=NOW)
    assert alerts.unpaid_debts == (open_debt,)


def test_due_soon_only_for_recurring_expenses():
    weekly_due = _expense(5, Frequency.WEEKLY)      # next in 2 days
    weekly_later = _expense(1, Frequency.WEEKLY)    # next in 6 days
    one_off = _expense(0, Frequency.NONE)
    alerts = compute_alerts([], [], [weekly_due, weekly_later, one_off], now=NOW)
    assert alerts.due_soon_expenses == (weekly_due,)
    assert alerts.due_soon_count == 1


def test_counts_and_navigation_targets():
    alerts = compute_alerts(
        [make_stock(quantity=1)], [_debt(), _debt("Tom")], [_expense(6, "weekly")], now=NOW,
    )
    assert (alerts.low_stock_count, alerts.due_soon_count, alerts.unpaid_debt_count) == (1, 1, 2)
    assert alerts.has_any
    assert alerts.navigation_targets() == ["stock", "expenses", "debts"]

    empty = LedgerAlerts()
    assert not empty.has_any
    assert empty.navigation_targets() == []


def test_aggregator_memoizes_on_input_identity():
    clock = FixedClock()
    agg = AlertAggregator(clock=clock)
    stock, debts, expenses = (make_stock(quantity=1),), (_debt(),), ()

    first = agg.compute(stock, debts, expenses)
    assert agg.compute(stock, debts, expenses) is first

    # equal content but a new sequence object -> recomputed
    second = agg.compute(list(stock), (_debt(),), expenses)
    assert second is not first
    assert second.unpaid_debt_count == 1


def test_aggregator_invalidate_follows_the_clock():
    clock = FixedClock()
    agg = AlertAggregator(clock=clock)
    expenses = (_expense(1, "weekly"),)   # next in 6 days
    assert agg.compute((), (), expenses).due_soon_count == 0

    clock.advance(days=4)
    # memo still holds the old answer until invalidated
    assert agg.compute((), (), expenses).due_soon_count == 0
    agg.invalidate()
    assert agg.compute((), (), expenses).due_soon_count == 1
