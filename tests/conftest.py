"""Shared test fixtures for FastLife tests."""

from __future__ import annotations

import os
from datetime import datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import yaml

from fastlife.tracker import Tracker

UTC = ZoneInfo("UTC")


def at(day: int, hour: int = 0, minute: int = 0, second: int = 0, month: int = 1) -> datetime:
    """A January 2024 timestamp in UTC, the workspace timezone."""
    return datetime(2024, month, day, hour, minute, second, tzinfo=UTC)


class FixedClock:
    """Callable clock for repositories; tests move it explicitly."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with standard structure."""
    root = tmp_path / "workspace"
    (root / "data").mkdir(parents=True)

    settings = {"timezone": "UTC", "fasting_goal_hours": 16.0}
    (root / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    # Set env var
    os.environ["FASTLIFE_ROOT"] = str(root)
    yield root
    # Cleanup
    if "FASTLIFE_ROOT" in os.environ:
        del os.environ["FASTLIFE_ROOT"]


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(at(13, 9))


@pytest.fixture
def tracker(workspace: Path, clock: FixedClock) -> Tracker:
    return Tracker.open(workspace, clock=clock)
