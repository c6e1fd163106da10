"""Tests for fastlife/models.py - record semantics and serialization."""

from datetime import timedelta

from conftest import at

from fastlife.models import (
    DEFAULT_GOAL_HOURS,
    DrinkEntry,
    FastingSession,
    FastingState,
    MoodEntry,
    Settings,
    SleepEntry,
    WeightEntry,
    within_window,
)


def test_in_progress_session_has_zero_duration():
    s = FastingSession(start_time=at(10, 8))
    assert s.is_complete is False
    assert s.duration == 0
    assert s.met_goal is False


def test_met_goal_uses_default_when_goal_missing():
    s = FastingSession(start_time=at(10, 0), end_time=at(10, 16))
    assert s.goal_hours is None
    assert s.effective_goal_hours == DEFAULT_GOAL_HOURS
    assert s.met_goal is True


def test_met_goal_boundary():
    start = at(10, 8)
    exact = FastingSession(start_time=start, end_time=start + timedelta(hours=18), goal_hours=18)
    short = FastingSession(start_time=start, end_time=start + timedelta(hours=18, seconds=-1), goal_hours=18)
    assert exact.met_goal is True
    assert short.met_goal is False


def test_eating_window_hours():
    s = FastingSession(start_time=at(10), eating_window_duration=8 * 3600)
    assert s.eating_window_hours == 8.0
    assert FastingSession(start_time=at(10)).eating_window_hours is None


def test_session_ids_unique():
    a = FastingSession(start_time=at(10))
    b = FastingSession(start_time=at(10))
    assert a.id != b.id


def test_fasting_session_to_dict_keys():
    s = FastingSession(start_time=at(10, 8), end_time=at(11), goal_hours=16.0)
    d = s.to_dict()
    assert d["startTime"] == "2024-01-10T08:00:00+00:00"
    assert d["endTime"] == "2024-01-11T00:00:00+00:00"
    assert d["goalHours"] == 16.0
    assert d["eatingWindowDuration"] is None
    assert d["source"] == "manual"
    assert FastingSession.from_dict(d) == s


def test_fasting_state_from_empty():
    state = FastingState.from_dict({})
    assert state.active_session is None
    assert state.history == []
    assert state.current_streak == 0


def test_fasting_state_ignores_unknown_keys():
    data = {
        "history": [{"startTime": "2024-01-10T08:00:00+00:00", "endTime": "2024-01-11T00:00:00+00:00"}],
        "currentStreak": 2,
        "somethingElse": True,
    }
    state = FastingState.from_dict(data)
    assert len(state.history) == 1
    assert state.history[0].id  # generated when missing
    assert state.current_streak == 2


def test_sleep_duration():
    e = SleepEntry(bed_time=at(10, 23), wake_time=at(11, 7), quality=4)
    assert e.duration == 8 * 3600
    assert e.timestamp == at(10, 23)


def test_mood_levels_clamped():
    m = MoodEntry(date=at(10), mood_level=14, energy_level=0)
    assert m.mood_level == 10
    assert m.energy_level == 1


def test_drink_entry_type_key():
    d = DrinkEntry(drink_type="coffee", amount=8.0, date=at(10, 7)).to_dict()
    assert d["type"] == "coffee"
    assert DrinkEntry.from_dict(d).drink_type == "coffee"


def test_weight_entry_body_fat_key():
    w = WeightEntry(date=at(10), weight=180.5, bmi=24.1, body_fat=18.0)
    d = w.to_dict()
    assert d["bodyFat"] == 18.0
    assert WeightEntry.from_dict(d) == w


def test_within_window_is_strict():
    assert within_window(at(10, 8), at(10, 8, 0, 59), 60) is True
    assert within_window(at(10, 8), at(10, 8, 1), 60) is False
    assert within_window(at(10, 8, 1), at(10, 8), 60) is False


def test_settings_defaults_and_invalid_goal():
    assert Settings.from_dict({}) == Settings()
    assert Settings.from_dict({"fasting_goal_hours": -2}).fasting_goal_hours == DEFAULT_GOAL_HOURS
    assert Settings.from_dict({"fasting_goal_hours": "x"}).fasting_goal_hours == DEFAULT_GOAL_HOURS
    s = Settings.from_dict({"timezone": "Europe/Berlin", "fasting_goal_hours": 18})
    assert s.timezone == "Europe/Berlin"
    assert s.fasting_goal_hours == 18.0
