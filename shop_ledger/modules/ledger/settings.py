"""
Per-user settings: manager PIN, currency symbol, daily reminder time and the
business name used in customer reminders.

SettingsController owns the ActionAuthorizationGate, since the gate's
expected PIN is a setting. Changing the PIN is itself a guarded action.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from PySide6.QtCore import QObject, Signal

from ...constants import (
    DEFAULT_BUSINESS_NAME,
    DEFAULT_CURRENCY,
    DEFAULT_MANAGER_PIN,
    DEFAULT_REMINDER_TIME,
)
from ...utils.validators import is_hhmm, non_empty
from .authorization import ActionAuthorizationGate
from .errors import LedgerValidationError, PersistenceError
from .scheduler import DailyReminder

_log = logging.getLogger(__name__)

KEY_PIN = "manager_pin"
KEY_CURRENCY = "currency"
KEY_REMINDER = "reminder_time"
KEY_BUSINESS = "business_name"


@dataclass(frozen=True)
class LedgerSettings:
    manager_pin: str = DEFAULT_MANAGER_PIN
    currency: str = DEFAULT_CURRENCY
    reminder_time: str = DEFAULT_REMINDER_TIME
    business_name: str = DEFAULT_BUSINESS_NAME


class SettingsController(QObject):
    settings_changed = Signal(object)
    notification = Signal(str, str)

    def __init__(self, store, *, reminder: Optional[DailyReminder] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.store = store
        self.reminder = reminder
        self._current = LedgerSettings()
        self.gate = ActionAuthorizationGate(self.manager_pin, parent=self)

    @property
    def current(self) -> LedgerSettings:
        return self._current

    def manager_pin(self) -> str:
        return self._current.manager_pin

    def load(self) -> LedgerSettings:
        try:
            values = self.store.settings.all()
        except Exception as e:
            _log.exception("loading settings failed")
            self.notification.emit("Failed to load settings.", "error")
            raise PersistenceError("Failed to load settings.") from e
        self._current = LedgerSettings(
            manager_pin=values.get(KEY_PIN, DEFAULT_MANAGER_PIN),
            currency=values.get(KEY_CURRENCY, DEFAULT_CURRENCY),
            reminder_time=values.get(KEY_REMINDER, DEFAULT_REMINDER_TIME),
            business_name=values.get(KEY_BUSINESS, DEFAULT_BUSINESS_NAME),
        )
        if self.reminder is not None:
            self.reminder.set_time(self._current.reminder_time)
        self.settings_changed.emit(self._current)
        return self._current

    def _save(self, key: str, value: str, updated: LedgerSettings, message: str) -> LedgerSettings:
        try:
            with self.store.transaction():
                self.store.settings.set(key, value)
        except Exception as e:
            _log.exception("saving setting %r failed", key)
            self.notification.emit("Could not save settings.", "error")
            raise PersistenceError("Could not save settings.") from e
        self._current = updated
        self.settings_changed.emit(updated)
        self.notification.emit(message, "success")
        return updated

    def change_pin(self, current_pin: str, new_pin: str) -> LedgerSettings:
        """Requires the current PIN; raises AuthorizationError otherwise."""
        if not non_empty(new_pin):
            raise LedgerValidationError("The new PIN cannot be empty.")
        new_pin = new_pin.strip()
        return self.gate.guard(
            current_pin,
            self._save, KEY_PIN, new_pin, replace(self._current, manager_pin=new_pin), "Password changed.",
        )

    def change_currency(self, currency: str) -> LedgerSettings:
        if not non_empty(currency):
            raise LedgerValidationError("Currency cannot be empty.")
        currency = currency.strip()
        return self._save(KEY_CURRENCY, currency, replace(self._current, currency=currency), "Currency updated.")

    def change_business_name(self, name: str) -> LedgerSettings:
        if not non_empty(name):
            raise LedgerValidationError("Business name cannot be empty.")
        name = name.strip()
        return self._save(KEY_BUSINESS, name, replace(self._current, business_name=name), "Business name updated.")

    def change_reminder_time(self, hhmm: str) -> LedgerSettings:
        if not is_hhmm(hhmm):
            raise LedgerValidationError("Reminder time must be HH:MM (24h).")
        hhmm = hhmm.strip()
        updated = self._save(KEY_REMINDER, hhmm, replace(self._current, reminder_time=hhmm), "Reminder alarm updated.")
        if self.reminder is not None:
            self.reminder.set_time(hhmm)
        return updated
