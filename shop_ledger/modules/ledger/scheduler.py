"""
Timers for the ledger app.

TimerService owns every QTimer the app uses, keyed by name, so they can be
cancelled together on shutdown and replaced on reconfiguration. It is passed
to whatever needs a timer instead of timers living at module level.

DailyReminder polls the clock and nudges the user once a day at the
configured HH:MM to record the day's business. It never touches ledger data.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Dict, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ...constants import DEFAULT_REMINDER_TIME, REMINDER_MESSAGE, REMINDER_POLL_MS
from ...utils.validators import is_hhmm

_log = logging.getLogger(__name__)


class TimerService(QObject):
    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._timers: Dict[str, QTimer] = {}

    def _make(self, name: str, interval_ms: int, callback: Callable, single_shot: bool) -> QTimer:
        self.cancel(name)
        timer = QTimer(self)
        timer.setObjectName(name)
        timer.setSingleShot(single_shot)
        timer.setInterval(int(interval_ms))
        if single_shot:
            def fire():
                self._timers.pop(name, None)
                timer.deleteLater()
                callback()
            timer.timeout.connect(fire)
        else:
            timer.timeout.connect(callback)
        self._timers[name] = timer
        timer.start()
        return timer

    def repeat(self, name: str, interval_ms: int, callback: Callable) -> QTimer:
        """Call `callback` every `interval_ms` until cancelled. Replaces a timer of the same name."""
        return self._make(name, interval_ms, callback, single_shot=False)

    def once(self, name: str, delay_ms: int, callback: Callable) -> QTimer:
        """
        Call `callback` once after `delay_ms`. Scheduling the same name again
        before it fires cancels the earlier call (debounce).
        """
        return self._make(name, delay_ms, callback, single_shot=True)

    def cancel(self, name: str) -> bool:
        timer = self._timers.pop(name, None)
        if timer is None:
            return False
        timer.stop()
        timer.deleteLater()
        return True

    def cancel_all(self) -> None:
        for name in list(self._timers):
            self.cancel(name)

    def is_active(self, name: str) -> bool:
        timer = self._timers.get(name)
        return bool(timer is not None and timer.isActive())

    def names(self) -> list[str]:
        return sorted(self._timers)


class DailyReminder(QObject):
    reminder_due = Signal(str)

    TIMER_NAME = "daily-reminder"

    def __init__(
        self,
        timers: TimerService,
        reminder_time: str = DEFAULT_REMINDER_TIME,
        *,
        clock: Callable[[], datetime] = datetime.now,
        poll_ms: int = REMINDER_POLL_MS,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._timers = timers
        self._clock = clock
        self._poll_ms = poll_ms
        self._time = DEFAULT_REMINDER_TIME
        self._last_shown: Optional[date] = None
        self.set_time(reminder_time)

    @property
    def reminder_time(self) -> str:
        return self._time

    @property
    def last_shown(self) -> Optional[date]:
        return self._last_shown

    def set_time(self, hhmm: str) -> None:
        if not is_hhmm(hhmm):
            raise ValueError(f"Reminder time must be HH:MM (24h), got {hhmm!r}.")
        self._time = hhmm.strip()
        _log.info("daily reminder set for %s", self._time)

    def start(self) -> None:
        self._timers.repeat(self.TIMER_NAME, self._poll_ms, self._tick)

    def stop(self) -> None:
        self._timers.cancel(self.TIMER_NAME)

    @property
    def running(self) -> bool:
        return self._timers.is_active(self.TIMER_NAME)

    def _tick(self) -> None:
        self.check(self._clock())

    def check(self, now: datetime) -> bool:
        """Emit the reminder if it is time and it has not been shown today."""
        if now.strftime("%H:%M") != self._time or self._last_shown == now.date():
            return False
        self._last_shown = now.date()
        _log.info("daily reminder fired")
        self.reminder_due.emit(REMINDER_MESSAGE)
        return True
