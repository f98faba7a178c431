"""
Projection of recurring expenses.

An expense's `date` is the anchor of its schedule. Nothing about the next
occurrence is stored; it is recomputed from (anchor, frequency, now) each time.

Months and years follow calendar rollover: each step moves the previous
occurrence to the same day of the next month (or year), and a day the target
month does not have spills into the month after. Jan 31 steps to Mar 3 in a
28-day February, and the schedule continues from there (Apr 3, May 3, ...).
Feb 29 steps to Mar 1 of the next year.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ...constants import DUE_SOON_DAYS
from .models import ExpenseRecord, Frequency

# "+infinity" for schedules that never recur
NEVER = datetime.max

_DAY = timedelta(days=1)


def _roll_months(when: datetime, months: int) -> datetime:
    """Same day-of-month `months` later; overflow days carry into the next month."""
    idx = when.month - 1 + months
    first = when.replace(year=when.year + idx // 12, month=idx % 12 + 1, day=1)
    return first + (when.day - 1) * _DAY


def _periods_elapsed(anchor: datetime, step_days: int, now: datetime) -> int:
    # whole fixed-length periods from anchor up to (at most) now
    return max((now - anchor) // (step_days * _DAY), 0)


def next_occurrence(anchor: datetime, frequency, *, now: Optional[datetime] = None) -> datetime:
    """
    Next due moment of a schedule anchored at `anchor`.

    - An anchor still in the future is itself the first occurrence.
    - Otherwise the schedule is stepped one period at a time from the anchor
      until it lands strictly after now.
    - `none` and unrecognised frequencies return NEVER.
    """
    freq = Frequency.parse(frequency)
    if freq is None or freq is Frequency.NONE:
        return NEVER

    now = now or datetime.now()
    if anchor > now:
        return anchor

    if freq in (Frequency.DAILY, Frequency.WEEKLY):
        step = 1 if freq is Frequency.DAILY else 7
        nxt = anchor + _periods_elapsed(anchor, step, now) * step * _DAY
        while nxt <= now:
            nxt += step * _DAY
        return nxt

    months = 1 if freq is Frequency.MONTHLY else 12
    nxt = anchor
    while nxt <= now:
        nxt = _roll_months(nxt, months)
    return nxt


def days_until(anchor: datetime, frequency, *, now: Optional[datetime] = None) -> Optional[float]:
    """Fractional days from now to the next occurrence, or None if it never recurs."""
    now = now or datetime.now()
    nxt = next_occurrence(anchor, frequency, now=now)
    if nxt == NEVER:
        return None
    return (nxt - now) / _DAY


def is_due_soon(
    expense: ExpenseRecord,
    threshold_days: float = DUE_SOON_DAYS,
    *,
    now: Optional[datetime] = None,
) -> bool:
    """
    True when the next occurrence falls within `threshold_days` of now.

    A one-day grace window (days >= -1) keeps a bill due "today" flagged.
    """
    days = days_until(expense.date, expense.frequency, now=now)
    if days is None:
        return False
    return -1 <= days <= threshold_days
