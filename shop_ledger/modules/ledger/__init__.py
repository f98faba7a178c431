# modules/ledger/__init__.py
from .alerts import AlertAggregator, LedgerAlerts, compute_alerts
from .authorization import ActionAuthorizationGate
from .coordinator import LedgerCoordinator, RecordedSale
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
)
from .recurrence import NEVER, is_due_soon, next_occurrence
from .scheduler import DailyReminder, TimerService
from .settings import LedgerSettings, SettingsController

__all__ = [
    "ActionAuthorizationGate",
    "AlertAggregator",
    "AuthorizationError",
    "CostHistoryEntry",
    "DailyReminder",
    "DebtRecord",
    "ExpenseRecord",
    "Frequency",
    "LedgerAlerts",
    "LedgerCoordinator",
    "LedgerError",
    "LedgerSettings",
    "LedgerValidationError",
    "NEVER",
    "PersistenceError",
    "RecordedSale",
    "SaleRecord",
    "SettingsController",
    "StockItem",
    "TimerService",
    "UnknownStockItemError",
    "compute_alerts",
    "is_due_soon",
    "next_occurrence",
]
