"""Cross-user leaderboard aggregation for streakboard.

Pure functions. Counts are rebuilt from every user's full task histories on
each call, since any user's change can reorder the board.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from streakboard.models import UserRecord
from streakboard.windows import WINDOWS, Window, classify_date, reference_date

DEFAULT_LEADERBOARD_SIZE = 5

_MEDALS = ("\U0001f947", "\U0001f948", "\U0001f949")  # gold, silver, bronze
_PARTICIPANT = "\U0001f3c5"


@dataclass
class LeaderboardRow:
    username: str
    counts: dict[Window, int] = field(default_factory=lambda: {w: 0 for w in WINDOWS})

    def count(self, window: Window | str) -> int:
        return self.counts[Window(window)]

    def to_dict(self) -> dict:
        return {"username": self.username, **{w.value: self.counts[w] for w in WINDOWS}}


def tally_user(record: UserRecord, now: date | str | None = None) -> LeaderboardRow:
    """Count completion events per window across all of a user's tasks.

    Archived tasks count. One date can land in several windows at once.
    """
    ref = reference_date(now)
    row = LeaderboardRow(username=record.display_name)
    for task in record.tasks:
        for day in task.history:
            for window in WINDOWS:
                if classify_date(day, window, ref):
                    row.counts[window] += 1
    return row


def rank_rows(
    rows: list[LeaderboardRow],
    window: Window | str,
    size: int = DEFAULT_LEADERBOARD_SIZE,
) -> list[dict]:
    """Sort rows by one window's count descending and keep the top size.

    Ties keep input order. Each entry: {"rank", "username", "count"}, rank 1-based.
    """
    window = Window(window)
    ordered = sorted(rows, key=lambda r: -r.count(window))
    return [
        {"rank": i + 1, "username": row.username, "count": row.count(window)}
        for i, row in enumerate(ordered[:size])
    ]


def build_leaderboard(
    users: Iterable[UserRecord],
    now: date | str | None = None,
    size: int = DEFAULT_LEADERBOARD_SIZE,
) -> dict[Window, list[dict]]:
    """Build the ranked top-size list for each window from all user records."""
    ref = reference_date(now)
    rows = [tally_user(user, ref) for user in users]
    return {window: rank_rows(rows, window, size) for window in WINDOWS}


def medal(rank: int) -> str:
    """Medal emoji for a 1-based rank: gold, silver, bronze, then a plain badge."""
    if 1 <= rank <= len(_MEDALS):
        return _MEDALS[rank - 1]
    return _PARTICIPANT
