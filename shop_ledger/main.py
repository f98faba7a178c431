"""
Headless status monitor.

Loads one user's ledger, logs the current warnings, then keeps running on the
Qt event loop: alerts are re-evaluated periodically and the daily reminder
fires at the configured time. Stop with Ctrl+C.
"""

from __future__ import annotations

import argparse
import signal
import sqlite3
import sys

from PySide6.QtCore import QCoreApplication

from .constants import ALERT_REFRESH_MS, APP_NAME
from .database import get_connection
from .database.store import SqliteLedgerStore
from .modules.ledger import (
    DailyReminder,
    LedgerAlerts,
    LedgerCoordinator,
    SettingsController,
    TimerService,
)
from .modules.ledger.errors import LedgerError
from .utils.loggers import get_logger

log = get_logger()


def describe(alerts: LedgerAlerts) -> str:
    if not alerts.has_any:
        return "no warnings"
    parts = []
    if alerts.low_stock_count:
        parts.append(f"{alerts.low_stock_count} Low Stock")
    if alerts.due_soon_count:
        parts.append(f"{alerts.due_soon_count} Bills Due")
    if alerts.unpaid_debt_count:
        parts.append(f"{alerts.unpaid_debt_count} Unpaid Debts")
    return ", ".join(parts)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="shop-ledger", description=f"{APP_NAME} status monitor")
    parser.add_argument("--db", default=None, help="SQLite database file (default: package data dir)")
    parser.add_argument("--user", type=int, default=1, help="user id whose ledger to watch")
    parser.add_argument("--once", action="store_true", help="print the warnings and exit")
    args = parser.parse_args(argv)

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName(APP_NAME)

    try:
        conn = get_connection(args.db)
    except sqlite3.Error as e:
        log.error("cannot open database %s: %s", args.db or "(default)", e)
        return 1
    store = SqliteLedgerStore(conn, args.user)

    timers = TimerService()
    reminder = DailyReminder(timers)
    settings = SettingsController(store, reminder=reminder)
    ledger = LedgerCoordinator(store, gate=settings.gate)

    ledger.notification.connect(lambda msg, kind: log.info("[%s] %s", kind, msg))
    settings.notification.connect(lambda msg, kind: log.info("[%s] %s", kind, msg))
    ledger.alerts_changed.connect(lambda alerts: log.info("status: %s", describe(alerts)))
    reminder.reminder_due.connect(lambda msg: log.info("reminder: %s", msg))

    try:
        settings.load()
        ledger.load()
    except LedgerError as e:
        log.error("%s", e)
        conn.close()
        return 1

    if args.once:
        conn.close()
        return 0

    timers.repeat("alert-refresh", ALERT_REFRESH_MS, ledger.refresh_alerts)
    reminder.start()

    signal.signal(signal.SIGINT, lambda *_: app.quit())
    # keep the Python interpreter responsive to Ctrl+C while Qt owns the loop
    timers.repeat("signal-pump", 500, lambda: None)

    try:
        return app.exec()
    finally:
        timers.cancel_all()
        conn.close()


if __name__ == "__main__":
    sys.exit(main())
