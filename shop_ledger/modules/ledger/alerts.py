"""
Warnings derived from the current ledger snapshot.

compute_alerts() is a pure function of its inputs; AlertAggregator adds a
one-entry memo keyed on the identity of the three input sequences so it can be
called on every state change / repaint without redoing the work.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ...constants import DUE_SOON_DAYS
from .models import DebtRecord, ExpenseRecord, Frequency, StockItem
from .recurrence import is_due_soon


@dataclass(frozen=True)
class LedgerAlerts:
    low_stock: Tuple[StockItem, ...] = ()
    due_soon_expenses: Tuple[ExpenseRecord, ...] = ()
    unpaid_debts: Tuple[DebtRecord, ...] = ()

    @property
    def low_stock_count(self) -> int:
        return len(self.low_stock)

    @property
    def due_soon_count(self) -> int:
        return len(self.due_soon_expenses)

    @property
    def unpaid_debt_count(self) -> int:
        return len(self.unpaid_debts)

    @property
    def has_any(self) -> bool:
        return bool(self.low_stock or self.due_soon_expenses or self.unpaid_debts)

    def navigation_targets(self) -> List[str]:
        """Tabs a status strip should offer shortcuts to, in display order."""
        targets = []
        if self.low_stock:
            targets.append("stock")
        if self.due_soon_expenses:
            targets.append("expenses")
        if self.unpaid_debts:
            targets.append("debts")
        return targets


def compute_alerts(
    stock: Sequence[StockItem],
    debts: Sequence[DebtRecord],
    expenses: Sequence[ExpenseRecord],
    *,
    now: Optional[datetime] = None,
    due_soon_days: float = DUE_SOON_DAYS,
) -> LedgerAlerts:
    now = now or datetime.now()
    return LedgerAlerts(
        low_stock=tuple(s for s in stock if s.is_low),
        due_soon_expenses=tuple(
            e for e in expenses
            if Frequency.parse(e.frequency) not in (None, Frequency.NONE)
            and is_due_soon(e, due_soon_days, now=now)
        ),
        unpaid_debts=tuple(d for d in debts if not d.is_paid),
    )


class AlertAggregator:
    """Memoizes compute_alerts() on the identity of its input sequences."""

    def __init__(self, due_soon_days: float = DUE_SOON_DAYS, clock=datetime.now):
        self.due_soon_days = due_soon_days
        self._clock = clock
        self._key: Optional[tuple] = None
        self._inputs: tuple = ()
        self._result: Optional[LedgerAlerts] = None

    def compute(self, stock, debts, expenses) -> LedgerAlerts:
        key = (id(stock), id(debts), id(expenses))
        if self._result is not None and key == self._key:
            return self._result
        self._result = compute_alerts(
            stock, debts, expenses,
            now=self._clock(), due_soon_days=self.due_soon_days,
        )
        self._key = key
        # hold references so the ids above cannot be recycled
        self._inputs = (stock, debts, expenses)
        return self._result

    def invalidate(self) -> None:
        self._key = None
        self._inputs = ()
        self._result = None
