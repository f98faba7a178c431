"""
Figures for the dashboard and the reports screen, plus the text of the
customer debt reminder. Everything here is a pure function of record lists.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from ...utils.helpers import fmt_money
from .models import DebtRecord, ExpenseRecord, SaleRecord, StockItem


@dataclass(frozen=True)
class BusinessSummary:
    total_sales: float
    total_cost: float
    gross_profit: float
    total_expenses: float
    net_profit: float
    profit_margin: float  # percent of total sales
    units_in_stock: int
    units_sold_this_month: int


@dataclass(frozen=True)
class DailyTotal:
    day: date
    sales: float
    expenses: float

    @property
    def net(self) -> float:
        return self.sales - self.expenses


def summarize(
    sales: Iterable[SaleRecord],
    expenses: Iterable[ExpenseRecord],
    stock: Iterable[StockItem],
    *,
    now: Optional[datetime] = None,
) -> BusinessSummary:
    now = now or datetime.now()
    sales = list(sales)
    total_sales = sum(s.total for s in sales)
    total_cost = sum(float(s.unit_cost or 0.0) * s.quantity for s in sales)
    gross = total_sales - total_cost
    total_expenses = sum(float(e.amount) for e in expenses)
    net = gross - total_expenses
    month_start = datetime(now.year, now.month, 1)
    return BusinessSummary(
        total_sales=total_sales,
        total_cost=total_cost,
        gross_profit=gross,
        total_expenses=total_expenses,
        net_profit=net,
        profit_margin=(net / total_sales * 100.0) if total_sales > 0 else 0.0,
        units_in_stock=sum(int(i.quantity) for i in stock),
        units_sold_this_month=sum(s.quantity for s in sales if s.date >= month_start),
    )


def daily_totals(sales: Iterable[SaleRecord], expenses: Iterable[ExpenseRecord]) -> List[DailyTotal]:
    """Sales and expense totals per calendar day, oldest first."""
    by_sales: Dict[date, float] = defaultdict(float)
    by_expenses: Dict[date, float] = defaultdict(float)
    for s in sales:
        by_sales[s.date.date()] += s.total
    for e in expenses:
        by_expenses[e.date.date()] += float(e.amount)
    days = sorted(set(by_sales) | set(by_expenses))
    return [DailyTotal(d, by_sales.get(d, 0.0), by_expenses.get(d, 0.0)) for d in days]


def debt_reminder_message(debt: DebtRecord, *, currency: str, business_name: str) -> str:
    note = f"Note: {debt.description}. " if debt.description else ""
    return (
        f"Hello {debt.debtor_name}, this is a reminder that you have an outstanding "
        f"balance of {currency}{fmt_money(debt.amount)} at {business_name}. "
        f"{note}Please arrange payment at your earliest convenience. Thank you!"
    )
