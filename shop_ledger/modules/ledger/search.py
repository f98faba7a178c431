"""Search-box filtering for the record lists. Matches are case-insensitive; newest first."""

from __future__ import annotations

from typing import Iterable, List

from .models import DebtRecord, ExpenseRecord, SaleRecord, StockItem


def _has(text: str | None, query: str) -> bool:
    return query.lower() in (text or "").lower()


def filter_sales(sales: Iterable[SaleRecord], query: str = "") -> List[SaleRecord]:
    rows = [s for s in sales if _has(s.item_name, query)]
    return sorted(rows, key=lambda s: s.date, reverse=True)


def filter_stock(stock: Iterable[StockItem], query: str = "") -> List[StockItem]:
    rows = [s for s in stock if _has(s.name, query)]
    return sorted(rows, key=lambda s: s.last_updated, reverse=True)


def filter_debts(debts: Iterable[DebtRecord], query: str = "") -> List[DebtRecord]:
    # phone numbers are matched as typed
    rows = [d for d in debts if _has(d.debtor_name, query) or query in (d.phone_number or "")]
    return sorted(rows, key=lambda d: d.date, reverse=True)


def filter_expenses(expenses: Iterable[ExpenseRecord], query: str = "") -> List[ExpenseRecord]:
    rows = [e for e in expenses if _has(e.category, query)]
    return sorted(rows, key=lambda e: e.date, reverse=True)
