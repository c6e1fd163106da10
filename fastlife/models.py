"""Typed dataclasses for the FastLife data model.

All models use from_dict/to_dict for JSON/YAML serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing optional keys use defaults.
Timestamps are timezone-aware datetimes stored as ISO-8601 strings.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


DEFAULT_GOAL_HOURS = 16.0

SOURCE_MANUAL = "manual"
SOURCE_HEALTH = "health"

# Health-bridge records this close to an existing one are the same record
SYNC_WINDOW_SECONDS = 300

DRINK_TYPES = ("water", "coffee", "tea")


def new_id() -> str:
    return uuid.uuid4().hex


def _ts(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def within_window(a: datetime, b: datetime, seconds: float) -> bool:
    """True when *a* and *b* are strictly less than *seconds* apart."""
    return abs((a - b).total_seconds()) < seconds


def _opt_float(value: Any) -> float | None:
    return float(value) if value is not None else None


def _opt_int(value: Any) -> int | None:
    return int(value) if value is not None else None


# ── Fasting ───────────────────────────────────────────────────


@dataclass
class FastingSession:
    """One fasting attempt. In progress while end_time is None."""

    start_time: datetime
    end_time: datetime | None = None
    goal_hours: float | None = None
    eating_window_duration: float | None = None  # seconds
    source: str = SOURCE_MANUAL
    id: str = field(default_factory=new_id)

    @property
    def duration(self) -> float:
        """Seconds fasted; 0 while in progress (never measured against now)."""
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    @property
    def is_complete(self) -> bool:
        return self.end_time is not None

    @property
    def effective_goal_hours(self) -> float:
        return self.goal_hours if self.goal_hours is not None else DEFAULT_GOAL_HOURS

    @property
    def met_goal(self) -> bool:
        return self.duration >= self.effective_goal_hours * 3600

    @property
    def eating_window_hours(self) -> float | None:
        if self.eating_window_duration is None:
            return None
        return self.eating_window_duration / 3600

    @property
    def timestamp(self) -> datetime:
        return self.start_time

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> FastingSession:
        return cls(
            id=str(d.get("id") or new_id()),
            start_time=datetime.fromisoformat(d["startTime"]),
            end_time=_ts(d.get("endTime")),
            goal_hours=_opt_float(d.get("goalHours")),
            eating_window_duration=_opt_float(d.get("eatingWindowDuration")),
            source=str(d.get("source", SOURCE_MANUAL)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "startTime": _iso(self.start_time),
            "endTime": _iso(self.end_time),
            "goalHours": self.goal_hours,
            "eatingWindowDuration": self.eating_window_duration,
            "source": self.source,
        }


@dataclass
class FastingState:
    """Contents of data/fasting.json."""

    active_session: FastingSession | None = None
    history: list[FastingSession] = field(default_factory=list)
    current_streak: int = 0
    longest_streak: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> FastingState:
        if not d or not isinstance(d, dict):
            return cls()
        active = d.get("activeSession")
        return cls(
            active_session=FastingSession.from_dict(active) if active else None,
            history=[FastingSession.from_dict(s) for s in (d.get("history") or [])],
            current_streak=int(d.get("currentStreak", 0) or 0),
            longest_streak=int(d.get("longestStreak", 0) or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "activeSession": self.active_session.to_dict() if self.active_session else None,
            "history": [s.to_dict() for s in self.history],
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
        }


# ── Other tracked domains ─────────────────────────────────────


@dataclass
class WeightEntry:
    date: datetime
    weight: float  # pounds
    bmi: float | None = None
    body_fat: float | None = None  # percent
    source: str = SOURCE_MANUAL  # manual, health, scale, other
    id: str = field(default_factory=new_id)

    @property
    def timestamp(self) -> datetime:
        return self.date

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> WeightEntry:
        return cls(
            id=str(d.get("id") or new_id()),
            date=datetime.fromisoformat(d["date"]),
            weight=float(d["weight"]),
            bmi=_opt_float(d.get("bmi")),
            body_fat=_opt_float(d.get("bodyFat")),
            source=str(d.get("source", SOURCE_MANUAL)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": _iso(self.date),
            "weight": self.weight,
            "bmi": self.bmi,
            "bodyFat": self.body_fat,
            "source": self.source,
        }


@dataclass
class SleepEntry:
    bed_time: datetime
    wake_time: datetime
    quality: int | None = None  # 1-5
    source: str = SOURCE_MANUAL
    id: str = field(default_factory=new_id)

    @property
    def duration(self) -> float:
        return (self.wake_time - self.bed_time).total_seconds()

    @property
    def timestamp(self) -> datetime:
        return self.bed_time

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SleepEntry:
        return cls(
            id=str(d.get("id") or new_id()),
            bed_time=datetime.fromisoformat(d["bedTime"]),
            wake_time=datetime.fromisoformat(d["wakeTime"]),
            quality=_opt_int(d.get("quality")),
            source=str(d.get("source", SOURCE_MANUAL)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "bedTime": _iso(self.bed_time),
            "wakeTime": _iso(self.wake_time),
            "quality": self.quality,
            "source": self.source,
        }


@dataclass
class DrinkEntry:
    drink_type: str  # water, coffee, tea
    amount: float  # ounces
    date: datetime
    source: str = SOURCE_MANUAL
    id: str = field(default_factory=new_id)

    @property
    def timestamp(self) -> datetime:
        return self.date

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DrinkEntry:
        return cls(
            id=str(d.get("id") or new_id()),
            drink_type=str(d.get("type", "water")),
            amount=float(d["amount"]),
            date=datetime.fromisoformat(d["date"]),
            source=str(d.get("source", SOURCE_MANUAL)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.drink_type,
            "amount": self.amount,
            "date": _iso(self.date),
            "source": self.source,
        }


@dataclass
class MoodEntry:
    date: datetime
    mood_level: int  # 1-10
    energy_level: int  # 1-10
    notes: str | None = None
    source: str = SOURCE_MANUAL
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.mood_level = max(1, min(10, self.mood_level))
        self.energy_level = max(1, min(10, self.energy_level))

    @property
    def timestamp(self) -> datetime:
        return self.date

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> MoodEntry:
        return cls(
            id=str(d.get("id") or new_id()),
            date=datetime.fromisoformat(d["date"]),
            mood_level=int(d["moodLevel"]),
            energy_level=int(d["energyLevel"]),
            notes=d.get("notes"),
            source=str(d.get("source", SOURCE_MANUAL)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": _iso(self.date),
            "moodLevel": self.mood_level,
            "energyLevel": self.energy_level,
            "notes": self.notes,
            "source": self.source,
        }


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str = "UTC"
    fasting_goal_hours: float = DEFAULT_GOAL_HOURS

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        try:
            goal = float(d.get("fasting_goal_hours", DEFAULT_GOAL_HOURS))
        except (TypeError, ValueError):
            goal = DEFAULT_GOAL_HOURS
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            fasting_goal_hours=goal if goal > 0 else DEFAULT_GOAL_HOURS,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "fasting_goal_hours": self.fasting_goal_hours,
        }
