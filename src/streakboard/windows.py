"""Leaderboard time windows and calendar month helpers.

Pure functions. Every function takes the reference "now" as an argument and
defaults to date.today() when it is omitted.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from enum import Enum

from streakboard.errors import InvalidDateError
from streakboard.streaks import to_iso

WEEKLY_DAYS = 7


class Window(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ALL_TIME = "allTime"

    @property
    def heading(self) -> str:
        return "ALL TIME" if self is Window.ALL_TIME else self.value.upper()


WINDOWS: tuple[Window, ...] = (Window.WEEKLY, Window.MONTHLY, Window.YEARLY, Window.ALL_TIME)


def reference_date(now: date | str | None) -> date:
    if now is None:
        return date.today()
    iso = to_iso(now)
    if iso is None:
        raise InvalidDateError(now)
    return date.fromisoformat(iso)


def classify_date(
    day: date | str,
    window: Window | str,
    now: date | str | None = None,
    strict: bool = False,
) -> bool:
    """Return True if day falls inside window relative to now.

    - weekly: rolling 7 days back from now, inclusive (0 <= now - day <= 7)
    - monthly: same calendar month and year as now
    - yearly: same calendar year as now
    - allTime: always
    Invalid dates are never in any window (or raise when strict).
    """
    iso = to_iso(day)
    if iso is None:
        if strict:
            raise InvalidDateError(day)
        return False

    window = Window(window)
    if window is Window.ALL_TIME:
        return True

    d = date.fromisoformat(iso)
    ref = reference_date(now)
    if window is Window.WEEKLY:
        return 0 <= (ref - d).days <= WEEKLY_DAYS
    if window is Window.MONTHLY:
        return (d.year, d.month) == (ref.year, ref.month)
    return d.year == ref.year


def windows_for(day: date | str, now: date | str | None = None) -> set[Window]:
    """All windows day counts toward. Windows overlap."""
    ref = reference_date(now)
    return {w for w in WINDOWS if classify_date(day, w, ref)}


def month_bounds(now: date | str | None = None) -> tuple[date, date]:
    """Return (first_day, last_day) of the month containing now."""
    ref = reference_date(now)
    last = calendar.monthrange(ref.year, ref.month)[1]
    return ref.replace(day=1), ref.replace(day=last)


def month_grid(now: date | str | None = None) -> list[str]:
    """Every date of now's month as YYYY-MM-DD, day 1 to the last day."""
    start, end = month_bounds(now)
    return [(start + timedelta(days=i)).isoformat() for i in range((end - start).days + 1)]
