"""Streak engine: current and longest runs of goal-met fasting days.

Both counters are recomputed from the full history on every call. History
can be changed anywhere (back-dated entries, imports, deletions), so there
is no incremental state to invalidate. One entry per calendar day keeps the
input to a few thousand sessions at most.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta, tzinfo
from typing import Iterable

from fastlife.models import FastingSession
from fastlife.workspace import local_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakCounts:
    current: int = 0
    longest: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"currentStreak": self.current, "longestStreak": self.longest}


def goal_met_days(sessions: Iterable[FastingSession], tz: tzinfo) -> list[date]:
    """Calendar days with a goal-met fast, most recent first."""
    met = [s for s in sessions if s.met_goal]
    met.sort(key=lambda s: s.start_time, reverse=True)
    return [local_day(s.start_time, tz) for s in met]


def current_streak(days: list[date], today: date) -> int:
    """Length of the run ending at the most recent goal-met day.

    The run is broken when that day is more than one day before *today*;
    a fast yesterday with none yet today keeps it alive.
    """
    if not days:
        return 0
    last = days[0]
    if (today - last).days > 1:
        return 0
    streak = 1
    cursor = last
    for day in days[1:]:
        if day == cursor - timedelta(days=1):
            streak += 1
            cursor = day
        else:
            break
    return streak


def longest_streak(days: list[date]) -> int:
    """Longest run of consecutive days anywhere in *days* (any order)."""
    longest = 0
    temp = 0
    previous: date | None = None
    for day in sorted(days):
        if previous is not None and (day - previous).days == 1:
            temp += 1
        else:
            temp = 1
        longest = max(longest, temp)
        previous = day
    return longest


def compute_streaks(sessions: Iterable[FastingSession], today: date, tz: tzinfo) -> StreakCounts:
    days = goal_met_days(sessions, tz)
    if not days:
        return StreakCounts()
    counts = StreakCounts(current=current_streak(days, today), longest=longest_streak(days))
    logger.debug(
        "Streaks over %d goal-met days: current=%d longest=%d",
        len(days), counts.current, counts.longest,
    )
    return counts
