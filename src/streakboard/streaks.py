"""Streak computation and completion recording for streakboard."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterable

from streakboard.errors import InvalidDateError
from streakboard.models import Task

logger = logging.getLogger(__name__)


class CompletionStatus(str, Enum):
    RECORDED = "recorded"
    DUPLICATE = "duplicate"
    INVALID_DATE = "invalid_date"


@dataclass
class CompletionResult:
    task: Task
    status: CompletionStatus
    streak_broken: bool = False
    gap_days: int | None = None  # days since the previous completion

    @property
    def changed(self) -> bool:
        return self.status is CompletionStatus.RECORDED


def _parse_date(d: str) -> date:
    """Parse a YYYY-MM-DD string to a date object."""
    return date.fromisoformat(d)


def to_iso(value: date | str) -> str | None:
    """Return the canonical YYYY-MM-DD form of value, or None if it is not a date.

    Strings must already be in the canonical form; date.fromisoformat alone
    would also accept '20240101' and similar.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or len(value) != 10:
        return None
    try:
        parsed = _parse_date(value)
    except ValueError:
        return None
    return value if parsed.isoformat() == value else None


def days_between(later: str, earlier: str) -> int:
    """Whole calendar days from earlier to later (both YYYY-MM-DD)."""
    return (_parse_date(later) - _parse_date(earlier)).days


def normalize_history(history: Iterable[date | str], strict: bool = False) -> list[str]:
    """Deduplicate and sort a history, dropping entries that are not dates.

    ISO date strings sort lexicographically in chronological order.
    """
    valid: set[str] = set()
    for raw in history:
        iso = to_iso(raw)
        if iso is None:
            if strict:
                raise InvalidDateError(raw)
            logger.warning("Dropping invalid history entry %r", raw)
            continue
        valid.add(iso)
    return sorted(valid)


def compute_streaks(sorted_dates: list[str]) -> tuple[int, int]:
    """Return (current_streak, longest_streak) for an ascending list of dates.

    current_streak is the run ending at the last entry, not at today.
    """
    if not sorted_dates:
        return 0, 0

    streak = 1
    longest = 1
    for i in range(1, len(sorted_dates)):
        if days_between(sorted_dates[i], sorted_dates[i - 1]) == 1:
            streak += 1
        else:
            streak = 1
        longest = max(longest, streak)

    return streak, longest


def record_completion(task: Task, day: date | str, strict: bool = False) -> CompletionResult:
    """Mark task as completed on day.

    Rules:
    - A day already in the history is a no-op (status DUPLICATE)
    - A value that is not a calendar date leaves the task alone (status
      INVALID_DATE), or raises InvalidDateError when strict
    - Otherwise the day is inserted and streak/longest_streak are recomputed
      over the whole history
    - streak_broken is set when the entry just before the new day is more
      than one day earlier; the completion is still recorded
    """
    iso = to_iso(day)
    if iso is None:
        if strict:
            raise InvalidDateError(day)
        logger.warning("Ignoring completion for task %s with invalid date %r", task.id, day)
        return CompletionResult(task=task, status=CompletionStatus.INVALID_DATE)

    if iso in task.history:
        return CompletionResult(task=task, status=CompletionStatus.DUPLICATE)

    history = normalize_history([*task.history, iso], strict=strict)

    streak_broken = False
    gap_days = None
    position = history.index(iso)
    if position > 0:
        gap_days = days_between(iso, history[position - 1])
        streak_broken = gap_days > 1

    streak, longest = compute_streaks(history)
    updated = task.with_changes(
        history=tuple(history),
        streak=streak,
        longest_streak=longest,
    )
    return CompletionResult(
        task=updated,
        status=CompletionStatus.RECORDED,
        streak_broken=streak_broken,
        gap_days=gap_days,
    )
