"""FastLife core library: fasting sessions, streaks and flat-file import/export.

Public API re-exports for convenient imports:
    from fastlife import Tracker, import_from_file, compute_streaks, ...
"""

# Errors
from fastlife.errors import (
    FastLifeError,
    PersistenceError,
    SessionStateError,
    FileAccessError,
    InvalidFormatError,
)

# Workspace & paths
from fastlife.workspace import (
    workspace_root,
    load_settings,
    save_settings,
    get_user_timezone,
    local_day,
)

# Models
from fastlife.models import (
    DEFAULT_GOAL_HOURS,
    FastingSession,
    FastingState,
    WeightEntry,
    SleepEntry,
    DrinkEntry,
    MoodEntry,
    Settings,
)

# Streaks
from fastlife.streaks import StreakCounts, compute_streaks

# Repositories
from fastlife.entries import EntryRepository
from fastlife.fasting import SessionRepository
from fastlife.tracker import Tracker

# Import / export
from fastlife.importer import (
    ImportResult,
    ImportPreview,
    SectionResult,
    import_from_file,
    preview_file,
)
from fastlife.exporter import render_export, export_to_file

# Hooks
from fastlife.hooks import run_hooks, VALID_HOOK_POINTS
