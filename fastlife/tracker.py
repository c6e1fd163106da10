"""One handle on every repository in a workspace."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable
from zoneinfo import ZoneInfo

from fastlife.entries import EntryRepository
from fastlife.fasting import SessionRepository
from fastlife.models import DrinkEntry, MoodEntry, SleepEntry, WeightEntry
from fastlife.workspace import (
    hydration_path,
    mood_path,
    sleep_path,
    weight_path,
    workspace_root,
)


@dataclass
class Tracker:
    """Repositories owned by the application context and passed to callers."""

    root: Path
    fasting: SessionRepository
    weight: EntryRepository[WeightEntry]
    hydration: EntryRepository[DrinkEntry]
    sleep: EntryRepository[SleepEntry]
    mood: EntryRepository[MoodEntry]

    @property
    def tz(self) -> ZoneInfo:
        return self.fasting.tz

    @classmethod
    def open(cls, root: Path | None = None, clock: Callable[[], datetime] | None = None) -> Tracker:
        if root is None:
            root = workspace_root()
        return cls(
            root=root,
            fasting=SessionRepository(root, clock=clock),
            weight=EntryRepository(weight_path(root), WeightEntry),
            hydration=EntryRepository(hydration_path(root), DrinkEntry),
            sleep=EntryRepository(sleep_path(root), SleepEntry),
            mood=EntryRepository(mood_path(root), MoodEntry),
        )
