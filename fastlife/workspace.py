"""Workspace root, settings, timezone and path helpers for FastLife."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastlife.fileio import read_yaml, write_yaml_atomic
from fastlife.models import Settings

logger = logging.getLogger(__name__)


def workspace_root() -> Path:
    """Get the workspace root directory (contains settings.yaml and data/)."""
    return Path(
        os.environ.get("FASTLIFE_ROOT", str(Path.home() / "fastlife"))
    ).expanduser().resolve()


def load_settings(root: Path | None = None) -> Settings:
    """Load settings.yaml, falling back to defaults for missing keys."""
    if root is None:
        root = workspace_root()
    return Settings.from_dict(read_yaml(settings_path(root)))


def save_settings(settings: Settings, root: Path | None = None) -> None:
    if root is None:
        root = workspace_root()
    write_yaml_atomic(settings_path(root), settings.to_dict())


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get user's timezone from settings.yaml, defaulting to UTC."""
    name = load_settings(root).timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r in settings, using UTC", name)
        return ZoneInfo("UTC")


def local_day(ts: datetime, tz: tzinfo) -> date:
    """Calendar day of *ts* on the user's local calendar."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=tz)
    return ts.astimezone(tz).date()


# ── Path helpers ──────────────────────────────────────────────

def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "hooks.yaml"


def fasting_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "fasting.json"


def weight_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "weight.json"


def hydration_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "hydration.json"


def sleep_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "sleep.json"


def mood_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "mood.json"
