"""
LedgerCoordinator: applies business events to the ledger.

Owns immutable in-memory mirrors of the four record lists and keeps them
consistent with the store:

- recording a sale decrements stock (case-insensitive name match) and, for a
  credit sale with an outstanding balance, opens a debt for the customer
- editing a stock item's cost price appends to its cost history
- everything else is pass-through CRUD
- deletes run only behind the manager PIN (ActionAuthorizationGate)

Every intent runs as one transaction. Changes are staged in a draft copy of
the mirrors; the draft replaces the mirrors only after the store commits, so
a failed write leaves both the database and the mirrors as they were.

Records are normalised (names stripped, blank optionals as "") before they
reach either side, so a mirror row always equals what the store reads back.

Signals:
  - data_changed(): mirrors replaced
  - alerts_changed(object): new LedgerAlerts after any change / refresh
  - notification(str, str): (message, kind) with kind in {"success", "error"}
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence, Tuple

from PySide6.QtCore import QObject, Signal

from ...constants import DEFAULT_MANAGER_PIN
from ...utils.helpers import now as local_now
from .alerts import AlertAggregator, LedgerAlerts
from .authorization import ActionAuthorizationGate
from .errors import (
    AuthorizationError,
    LedgerError,
    LedgerValidationError,
    PersistenceError,
    UnknownStockItemError,
)
from .models import (
    CostHistoryEntry,
    DebtRecord,
    ExpenseRecord,
    Frequency,
    SaleRecord,
    StockItem,
    same_name,
)
from .settings import KEY_PIN

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedSale:
    sale: SaleRecord
    debt: Optional[DebtRecord] = None


@dataclass
class _Draft:
    sales: List[SaleRecord] = field(default_factory=list)
    stock: List[StockItem] = field(default_factory=list)
    debts: List[DebtRecord] = field(default_factory=list)
    expenses: List[ExpenseRecord] = field(default_factory=list)


def credit_debt_description(sale: SaleRecord) -> str:
    text = f"Credit sale: {sale.quantity} x {sale.item_name} @ {float(sale.unit_price):.2f}"
    if sale.paid_amount:
        text += f" (paid {float(sale.paid_amount):.2f})"
    return text


# ---- normalisation: the mirror holds exactly what the store will read back ----

def _clean_sale(sale: SaleRecord) -> SaleRecord:
    return replace(sale, item_name=(sale.item_name or "").strip(), category=sale.category or "")


def _clean_stock(item: StockItem) -> StockItem:
    return replace(item, name=(item.name or "").strip())


def _clean_debt(debt: DebtRecord) -> DebtRecord:
    return replace(
        debt,
        debtor_name=(debt.debtor_name or "").strip(),
        phone_number=debt.phone_number or "",
        description=debt.description or "",
    )


def _clean_expense(expense: ExpenseRecord) -> ExpenseRecord:
    # an unknown frequency is left as given; the store refuses it
    return replace(
        expense,
        category=(expense.category or "").strip(),
        description=expense.description or "",
        frequency=Frequency.parse(expense.frequency) or expense.frequency,
    )


class LedgerCoordinator(QObject):
    data_changed = Signal()
    alerts_changed = Signal(object)
    notification = Signal(str, str)

    def __init__(
        self,
        store,
        *,
        clock: Callable = local_now,
        aggregator: Optional[AlertAggregator] = None,
        gate: Optional[ActionAuthorizationGate] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.store = store
        self._clock = clock
        self.aggregator = aggregator or AlertAggregator(clock=clock)
        # without a shared gate, check against the PIN currently in the store
        self.gate = gate or ActionAuthorizationGate(
            lambda: store.settings.get(KEY_PIN, DEFAULT_MANAGER_PIN), parent=self,
        )
        self._sales: Tuple[SaleRecord, ...] = ()
        self._stock: Tuple[StockItem, ...] = ()
        self._debts: Tuple[DebtRecord, ...] = ()
        self._expenses: Tuple[ExpenseRecord, ...] = ()

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------
    @property
    def sales(self) -> Tuple[SaleRecord, ...]:
        return self._sales

    @property
    def stock(self) -> Tuple[StockItem, ...]:
        return self._stock

    @property
    def debts(self) -> Tuple[DebtRecord, ...]:
        return self._debts

    @property
    def expenses(self) -> Tuple[ExpenseRecord, ...]:
        return self._expenses

    @property
    def alerts(self) -> LedgerAlerts:
        return self.aggregator.compute(self._stock, self._debts, self._expenses)

    def load(self) -> None:
        """(Re)read everything from the store; discards whatever the mirrors held."""
        try:
            sales = tuple(self.store.sales.list())
            stock = tuple(self.store.stock.list())
            debts = tuple(self.store.debts.list())
            expenses = tuple(self.store.expenses.list())
        except Exception as e:
            _log.exception("loading ledger failed")
            self.notification.emit("Failed to load data.", "error")
            raise PersistenceError("Failed to load data.") from e
        self._sales, self._stock, self._debts, self._expenses = sales, stock, debts, expenses
        _log.info(
            "ledger loaded: %d sales, %d stock items, %d debts, %d expenses",
            len(sales), len(stock), len(debts), len(expenses),
        )
        self._publish()

    def refresh_alerts(self) -> LedgerAlerts:
        """Recompute alerts against the current clock (due-soon windows move with time)."""
        self.aggregator.invalidate()
        alerts = self.alerts
        self.alerts_changed.emit(alerts)
        return alerts

    # ------------------------------------------------------------------
    # Intent plumbing
    # ------------------------------------------------------------------
    def _publish(self) -> None:
        self.data_changed.emit()
        self.alerts_changed.emit(self.alerts)

    def _notify(self, message: str, kind: str = "success") -> None:
        self.notification.emit(message, kind)

    def _rejected(self, exc: LedgerError) -> LedgerError:
        _log.warning("intent rejected: %s", exc)
        self._notify(str(exc), "error")
        return exc

    def _authorized(self, pin: Optional[str], action: Callable, *args):
        try:
            return self.gate.guard(pin, action, *args)
        except AuthorizationError as e:
            raise self._rejected(e)

    @contextmanager
    def _intent(self, what: str):
        """
        Stage changes in a draft and run the store calls in one transaction.
        The draft is committed to the mirrors only if the transaction commits.
        """
        draft = _Draft(
            sales=list(self._sales),
            stock=list(self._stock),
            debts=list(self._debts),
            expenses=list(self._expenses),
        )
        try:
            with self.store.transaction():
                yield draft
        except LedgerError as e:
            _log.warning("intent %r aborted and rolled back: %s", what, e)
            self._notify(str(e), "error")
            raise
        except Exception as e:
            message = f"Could not {what}. Nothing was saved."
            _log.exception("store rejected intent %r; rolled back", what)
            self._notify(message, "error")
            raise PersistenceError(message) from e
        self._commit(draft)
        _log.info("committed: %s", what)

    def _commit(self, draft: _Draft) -> None:
        def swap(old: tuple, new: list) -> tuple:
            # keep the old tuple when nothing changed so memoized alerts survive
            new_t = tuple(new)
            return old if new_t == old else new_t

        self._sales = swap(self._sales, draft.sales)
        self._stock = swap(self._stock, draft.stock)
        self._debts = swap(self._debts, draft.debts)
        self._expenses = swap(self._expenses, draft.expenses)
        self._publish()

    @staticmethod
    def _find(records: Sequence, attr: str, key: str):
        for r in records:
            if getattr(r, attr) == key:
                return r
        return None

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------
    def record_sale(self, sale: SaleRecord) -> RecordedSale:
        """
        Persist a sale, decrement the matching stock and, for a credit sale
        with a positive balance and a customer name, open a debt.

        Raises UnknownStockItemError (before touching the store) when no stock
        item carries the sale's item name. If the store decrements a different
        number of rows than the mirror matched, nothing is saved.
        """
        if int(sale.quantity) <= 0:
            raise self._rejected(LedgerValidationError("Quantity must be at least 1."))

        sale = _clean_sale(sale)
        matches = [s for s in self._stock if same_name(s.name, sale.item_name)]
        if not matches:
            raise self._rejected(UnknownStockItemError(sale.item_name))
        if len(matches) > 1:
            _log.warning(
                "%d stock items are named %r; every one of them is decremented",
                len(matches), sale.item_name,
            )

        ts = self._clock()
        if sale.unit_cost is None:
            sale = replace(sale, unit_cost=matches[0].cost_price)
        if sale.is_on_credit and sale.balance is None:
            sale = replace(sale, balance=sale.total - float(sale.paid_amount or 0.0))

        debt = None
        customer = (sale.customer_name or "").strip()
        if sale.is_on_credit and float(sale.balance or 0.0) > 0 and customer:
            debt = _clean_debt(DebtRecord(
                debtor_name=customer,
                phone_number=sale.customer_phone or "",
                amount=float(sale.balance),
                description=credit_debt_description(sale),
                date=sale.date,
                is_paid=False,
            ))

        with self._intent("record the sale") as draft:
            self.store.sales.create(sale)
            touched = self.store.stock.adjust_quantity(sale.item_name, -int(sale.quantity), ts)
            if touched != len(matches):
                raise PersistenceError(
                    f'Stock for "{sale.item_name}" changed since it was loaded. '
                    "Reload and try again; nothing was saved."
                )
            if debt is not None:
                self.store.debts.create(debt)

            draft.sales.insert(0, sale)
            draft.stock = [
                replace(s, quantity=s.quantity - int(sale.quantity), last_updated=ts)
                if same_name(s.name, sale.item_name) else s
                for s in draft.stock
            ]
            if debt is not None:
                draft.debts.insert(0, debt)

        self._notify("Sale recorded!")
        return RecordedSale(sale=sale, debt=debt)

    def delete_sale(self, sale_id: str, pin: Optional[str]) -> None:
        self._authorized(pin, self._delete_sale, sale_id)

    def _delete_sale(self, sale_id: str) -> None:
        with self._intent("delete the sale") as draft:
            self.store.sales.delete(sale_id)
            draft.sales = [s for s in draft.sales if s.sale_id != sale_id]
        self._notify("Sale record deleted.")

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------
    def record_stock_item(self, item: StockItem) -> StockItem:
        ts = self._clock()
        item = _clean_stock(item)
        if any(same_name(s.name, item.name) for s in self._stock):
            _log.warning("a stock item named %r already exists; names are matched case-insensitively", item.name)
        history = item.cost_history or (CostHistoryEntry(price=float(item.cost_price), date=ts),)
        item = replace(item, last_updated=ts, cost_history=tuple(history))

        with self._intent("add the stock item") as draft:
            self.store.stock.create(item)
            draft.stock.insert(0, item)
        self._notify("Stock added.")
        return item

    def update_stock_item(self, item: StockItem) -> StockItem:
        """
        Save an edited stock item. A changed cost price appends (new cost, now)
        to the stored cost history; an unchanged one appends nothing.
        """
        stored = self._find(self._stock, "item_id", item.item_id)
        if stored is None:
            raise self._rejected(LedgerValidationError(f"Stock item {item.item_id!r} not found."))

        ts = self._clock()
        history = tuple(stored.cost_history)
        if float(item.cost_price) != float(stored.cost_price):
            history += (CostHistoryEntry(price=float(item.cost_price), date=ts),)
        item = replace(_clean_stock(item), last_updated=ts, cost_history=history)

        with self._intent("update the stock item") as draft:
            self.store.stock.update(item)
            draft.stock = [item if s.item_id == item.item_id else s for s in draft.stock]
        self._notify("Stock item updated.")
        return item

    def delete_stock_item(self, item_id: str, pin: Optional[str]) -> None:
        self._authorized(pin, self._delete_stock_item, item_id)

    def _delete_stock_item(self, item_id: str) -> None:
        with self._intent("delete the stock item") as draft:
            self.store.stock.delete(item_id)
            draft.stock = [s for s in draft.stock if s.item_id != item_id]
        self._notify("Stock record deleted.")

    # ------------------------------------------------------------------
    # Debts
    # ------------------------------------------------------------------
    def record_debt(self, debt: DebtRecord) -> DebtRecord:
        debt = _clean_debt(debt)
        with self._intent("record the debt") as draft:
            self.store.debts.create(debt)
            draft.debts.insert(0, debt)
        self._notify("Debt recorded.")
        return debt

    def update_debt(self, debt: DebtRecord) -> DebtRecord:
        debt = _clean_debt(debt)
        stored = self._find(self._debts, "debt_id", debt.debt_id)
        if stored is not None:
            # the store never rewrites the date of a debt
            debt = replace(debt, date=stored.date)
        with self._intent("update the debt") as draft:
            self.store.debts.update(debt)
            draft.debts = [debt if d.debt_id == debt.debt_id else d for d in draft.debts]
        self._notify("Debt updated.")
        return debt

    def toggle_debt_paid(self, debt_id: str) -> None:
        with self._intent("change the debt status") as draft:
            self.store.debts.toggle_paid(debt_id)
            draft.debts = [
                replace(d, is_paid=not d.is_paid) if d.debt_id == debt_id else d
                for d in draft.debts
            ]
        self._notify("Debt status changed.")

    def delete_debt(self, debt_id: str, pin: Optional[str]) -> None:
        self._authorized(pin, self._delete_debt, debt_id)

    def _delete_debt(self, debt_id: str) -> None:
        with self._intent("delete the debt") as draft:
            self.store.debts.delete(debt_id)
            draft.debts = [d for d in draft.debts if d.debt_id != debt_id]
        self._notify("Debt record deleted.")

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------
    def record_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        expense = _clean_expense(expense)
        with self._intent("log the expense") as draft:
            self.store.expenses.create(expense)
            draft.expenses.insert(0, expense)
        self._notify("Expense logged.")
        return expense

    def update_expense(self, expense: ExpenseRecord) -> ExpenseRecord:
        expense = _clean_expense(expense)
        with self._intent("update the expense") as draft:
            self.store.expenses.update(expense)
            draft.expenses = [
                expense if e.expense_id == expense.expense_id else e for e in draft.expenses
            ]
        self._notify("Expense updated.")
        return expense

    def delete_expense(self, expense_id: str, pin: Optional[str]) -> None:
        self._authorized(pin, self._delete_expense, expense_id)

    def _delete_expense(self, expense_id: str) -> None:
        with self._intent("delete the expense") as draft:
            self.store.expenses.delete(expense_id)
            draft.expenses = [e for e in draft.expenses if e.expense_id != expense_id]
        self._notify("Expense record deleted.")
