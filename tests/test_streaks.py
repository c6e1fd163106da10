"""Tests for fastlife/streaks.py - current and longest runs."""

from datetime import date, timedelta
from zoneinfo import ZoneInfo

from conftest import at

from fastlife.models import FastingSession
from fastlife.streaks import (
    StreakCounts,
    compute_streaks,
    current_streak,
    goal_met_days,
    longest_streak,
)

UTC = ZoneInfo("UTC")


def _met(day: int) -> FastingSession:
    return FastingSession(start_time=at(day, 8), end_time=at(day, 8) + timedelta(hours=16), goal_hours=16)


def _missed(day: int) -> FastingSession:
    return FastingSession(start_time=at(day, 8), end_time=at(day, 8) + timedelta(hours=10), goal_hours=16)


def test_consecutive_days_ending_yesterday():
    counts = compute_streaks([_met(10), _met(11), _met(12)], date(2024, 1, 13), UTC)
    assert counts == StreakCounts(current=3, longest=3)


def test_gap_breaks_run():
    counts = compute_streaks([_met(10), _met(12)], date(2024, 1, 13), UTC)
    assert counts == StreakCounts(current=1, longest=1)


def test_empty_history():
    assert compute_streaks([], date(2024, 1, 13), UTC) == StreakCounts(0, 0)


def test_stale_run_has_no_current():
    counts = compute_streaks([_met(5), _met(6), _met(7)], date(2024, 1, 13), UTC)
    assert counts.current == 0
    assert counts.longest == 3


def test_run_including_today():
    counts = compute_streaks([_met(11), _met(12), _met(13)], date(2024, 1, 13), UTC)
    assert counts.current == 3


def test_missed_goal_days_do_not_count():
    counts = compute_streaks([_met(10), _missed(11), _met(12)], date(2024, 1, 13), UTC)
    assert counts == StreakCounts(current=1, longest=1)


def test_longest_found_in_the_past():
    sessions = [_met(d) for d in (1, 2, 3, 4, 8, 9, 12)]
    counts = compute_streaks(sessions, date(2024, 1, 13), UTC)
    assert counts.current == 1
    assert counts.longest == 4


def test_longest_at_least_current():
    histories = [
        [],
        [_met(12)],
        [_met(10), _met(12), _met(13)],
        [_met(d) for d in range(1, 14)],
        [_met(1), _met(3), _met(5), _missed(6), _met(12)],
    ]
    for sessions in histories:
        counts = compute_streaks(sessions, date(2024, 1, 13), UTC)
        assert counts.longest >= counts.current


def test_days_use_local_calendar():
    tz = ZoneInfo("America/Los_Angeles")
    # 2024-01-11 03:00 UTC is still Jan 10 in Los Angeles
    s = FastingSession(start_time=at(11, 3), end_time=at(11, 20), goal_hours=16)
    assert goal_met_days([s], tz) == [date(2024, 1, 10)]


def test_current_streak_helpers():
    days = [date(2024, 1, 12), date(2024, 1, 11), date(2024, 1, 9)]
    assert current_streak(days, date(2024, 1, 13)) == 2
    assert current_streak(days, date(2024, 1, 14)) == 0
    assert longest_streak(list(reversed(days))) == 2


def test_counts_to_dict():
    assert StreakCounts(2, 5).to_dict() == {"currentStreak": 2, "longestStreak": 5}
