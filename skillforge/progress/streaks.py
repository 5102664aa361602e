"""
Streak Calculator
=================
Consecutive-day runs over progress snapshots. Every streak shown anywhere
(one roadmap, all roadmaps, dashboard) goes through compute_streaks so
they agree on the same log set.

`current` is the run ending at the latest logged day, not at today: a user
idle for a week still sees the streak they ended on.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from sqlalchemy.orm import Session

from ..models import ProgressLog


@dataclass(frozen=True)
class Streaks:
    current: int = 0
    longest: int = 0

    def to_dict(self) -> dict:
        return {"currentStreak": self.current, "longestStreak": self.longest}


def to_day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def compute_streaks(stamps: Iterable[date | datetime]) -> Streaks:
    days = sorted({to_day(s) for s in stamps})
    current = longest = 0
    for i, day in enumerate(days):
        if i == 0:
            current = longest = 1
            continue
        gap = (day - days[i - 1]).days
        if gap == 1:
            current += 1
        else:
            # Days are deduplicated, so any other gap is > 1
            longest = max(longest, current)
            current = 1
    longest = max(longest, current)
    return Streaks(current=current, longest=longest)


def user_streaks(db: Session, user_id: int, roadmap_id: int | None = None) -> Streaks:
    """Streaks over the user's snapshots, optionally for one roadmap only."""
    query = db.query(ProgressLog.day).filter(ProgressLog.user_id == user_id)
    if roadmap_id is not None:
        query = query.filter(ProgressLog.roadmap_id == roadmap_id)
    return compute_streaks(day for (day,) in query.all())
