"""
Value types for the ledger.

Every record is a frozen dataclass: the coordinator builds new values with
`dataclasses.replace` instead of mutating what the mirrors hold, so a failed
intent can simply drop its draft.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from ...constants import DEFAULT_LOW_STOCK_THRESHOLD
from ...utils.helpers import new_id


class Frequency(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value) -> Optional["Frequency"]:
        """Return the matching member, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class SaleRecord:
    item_name: str
    category: str
    quantity: int
    unit_price: float
    date: datetime
    unit_cost: Optional[float] = None
    is_on_credit: bool = False
    paid_amount: Optional[float] = None
    balance: Optional[float] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    sale_id: str = field(default_factory=new_id)

    @property
    def total(self) -> float:
        return float(self.unit_price) * self.quantity

    @property
    def profit(self) -> float:
        return (float(self.unit_price) - float(self.unit_cost or 0.0)) * self.quantity


@dataclass(frozen=True)
class CostHistoryEntry:
    price: float
    date: datetime


@dataclass(frozen=True)
class StockItem:
    name: str
    quantity: int
    cost_price: float
    selling_price: float
    last_updated: datetime
    low_stock_threshold: Optional[int] = DEFAULT_LOW_STOCK_THRESHOLD
    cost_history: Tuple[CostHistoryEntry, ...] = ()
    image_url: Optional[str] = None
    item_id: str = field(default_factory=new_id)

    @property
    def effective_threshold(self) -> int:
        if self.low_stock_threshold is None:
            return DEFAULT_LOW_STOCK_THRESHOLD
        return int(self.low_stock_threshold)

    @property
    def is_low(self) -> bool:
        return self.quantity <= self.effective_threshold


@dataclass(frozen=True)
class DebtRecord:
    debtor_name: str
    phone_number: str
    amount: float
    description: str
    date: datetime
    is_paid: bool = False
    debt_id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class ExpenseRecord:
    category: str
    amount: float
    description: str
    date: datetime
    frequency: Frequency = Frequency.NONE
    expense_id: str = field(default_factory=new_id)


def fold_name(name: str | None) -> str:
    """
    Comparison key for item names: surrounding whitespace dropped, full
    Unicode case folding. The stock repository registers this same function
    on its connection, so memory and SQL agree on what matches.
    """
    return (name or "").strip().casefold()


def same_name(a: str | None, b: str | None) -> bool:
    """Case-insensitive name equality; the join key between sales and stock."""
    return fold_name(a) == fold_name(b)
