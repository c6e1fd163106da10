"""Fasting session repository for FastLife.

Owns the fasting history and the single in-progress session. History keeps
at most one session per local calendar day (a later commit for the same day
replaces the earlier one), holds only completed sessions, and is sorted by
start time descending after every mutation. Streaks are recomputed and the
store rewritten before each mutating call returns.

Callers must serialize mutations; there is no internal locking.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterable

from fastlife.errors import PersistenceError, SessionStateError
from fastlife.fileio import read_json, write_json_atomic
from fastlife.hooks import run_hooks
from fastlife.models import (
    SOURCE_HEALTH,
    SOURCE_MANUAL,
    SYNC_WINDOW_SECONDS,
    FastingSession,
    FastingState,
    new_id,
    within_window,
)
from fastlife.streaks import StreakCounts, compute_streaks
from fastlife.workspace import (
    fasting_path,
    get_user_timezone,
    load_settings,
    local_day,
    save_settings,
    workspace_root,
)

logger = logging.getLogger(__name__)


class SessionRepository:
    """Single source of truth for what fasting happened."""

    def __init__(
        self,
        root: Path | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.root = root if root is not None else workspace_root()
        self.tz = get_user_timezone(self.root)
        self._clock = clock or (lambda: datetime.now(self.tz))
        self._settings = load_settings(self.root)
        self._path = fasting_path(self.root)

        state = self._load()
        self._active = state.active_session
        self._history = state.history
        self._streaks = StreakCounts()
        self._recompute()

    # ── Persistence ───────────────────────────────────────────

    def _load(self) -> FastingState:
        data = read_json(self._path)
        try:
            state = FastingState.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(self._path, f"corrupt record ({e})") from e
        complete = [s for s in state.history if s.is_complete]
        dropped = len(state.history) - len(complete)
        if dropped:
            logger.info("Dropped %d incomplete session(s) from stored history", dropped)
        complete.sort(key=lambda s: s.start_time, reverse=True)
        state.history = complete
        return state

    def _save(self) -> None:
        state = FastingState(
            active_session=self._active,
            history=self._history,
            current_streak=self._streaks.current,
            longest_streak=self._streaks.longest,
        )
        write_json_atomic(self._path, state.to_dict())

    # ── Internals ─────────────────────────────────────────────

    def _today(self) -> date:
        return local_day(self._clock(), self.tz)

    def _recompute(self) -> StreakCounts:
        self._streaks = compute_streaks(self._history, self._today(), self.tz)
        return self._streaks

    def _commit(self, session: FastingSession) -> FastingSession | None:
        """Insert *session*, replacing any on the same local day.

        Returns the replaced session, if there was one.
        """
        day = local_day(session.start_time, self.tz)
        replaced = None
        for i, existing in enumerate(self._history):
            if local_day(existing.start_time, self.tz) == day:
                logger.debug("Replacing session %s for %s", existing.id, day)
                replaced = existing
                self._history[i] = session
                break
        else:
            self._history.append(session)
        self._history.sort(key=lambda s: s.start_time, reverse=True)
        return replaced

    def _eating_window_before(self, start: datetime) -> float | None:
        """Seconds between the latest recorded fast ending and *start*."""
        if not self._history or self._history[0].end_time is None:
            return None
        gap = (start - self._history[0].end_time).total_seconds()
        return gap if gap > 0 else None

    def _notify(self, hook_point: str, session: FastingSession) -> None:
        run_hooks(hook_point, {
            "event": hook_point,
            "session": session.to_dict(),
            "goalHours": session.effective_goal_hours,
            "currentStreak": self._streaks.current,
            "longestStreak": self._streaks.longest,
        }, self.root)

    # ── Queries ───────────────────────────────────────────────

    @property
    def current_session(self) -> FastingSession | None:
        return self._active

    @property
    def current_streak(self) -> int:
        return self._streaks.current

    @property
    def longest_streak(self) -> int:
        return self._streaks.longest

    @property
    def streaks(self) -> StreakCounts:
        return self._streaks

    @property
    def goal_hours(self) -> float:
        return self._settings.fasting_goal_hours

    def history(self, as_of: datetime | None = None) -> tuple[FastingSession, ...]:
        """Completed sessions, most recent first; optionally only those started by *as_of*."""
        if as_of is None:
            return tuple(self._history)
        return tuple(s for s in self._history if s.start_time <= as_of)

    def find_near(self, timestamp: datetime, window_seconds: float) -> FastingSession | None:
        for session in self._history:
            if within_window(session.start_time, timestamp, window_seconds):
                return session
        return None

    # ── Lifecycle ─────────────────────────────────────────────

    def start_session(self, goal_hours: float | None = None) -> FastingSession:
        """Start a new fast now. Raises SessionStateError if one is in progress."""
        if self._active is not None:
            raise SessionStateError("A fast is already in progress. Stop it first.")

        now = self._clock()
        session = FastingSession(
            start_time=now,
            goal_hours=goal_hours if goal_hours is not None else self.goal_hours,
            eating_window_duration=self._eating_window_before(now),
        )
        self._active = session
        self._recompute()
        self._save()
        logger.info("Started fast %s (goal %.1fh)", session.id, session.effective_goal_hours)
        self._notify("on_fast_start", session)
        return session

    def stop_session(
        self,
        end_time: datetime | None = None,
        start_time: datetime | None = None,
    ) -> FastingSession:
        """Finish the in-progress fast and commit it to history.

        Passing *start_time* back-dates the start as well as the end.
        """
        if self._active is None:
            raise SessionStateError("No fast in progress to stop.")

        session = replace(
            self._active,
            start_time=start_time if start_time is not None else self._active.start_time,
            end_time=end_time if end_time is not None else self._clock(),
        )
        self._commit(session)
        self._active = None
        self._recompute()
        self._save()
        logger.info(
            "Stopped fast %s after %.2fh (goal met: %s)",
            session.id, session.duration / 3600, session.met_goal,
        )
        self._notify("on_fast_stop", session)
        return session

    def discard_current_session(self) -> FastingSession | None:
        """Drop the in-progress fast without recording it."""
        session = self._active
        if session is None:
            return None
        self._active = None
        self._save()
        logger.info("Discarded in-progress fast %s", session.id)
        return session

    def add_manual_session(
        self,
        start_time: datetime,
        end_time: datetime,
        goal_hours: float | None = None,
        eating_window_duration: float | None = None,
        source: str = SOURCE_MANUAL,
        infer_eating_window: bool = True,
    ) -> FastingSession:
        """Commit an already-complete fast (backfill, import). Fires no hooks."""
        if eating_window_duration is None and infer_eating_window:
            eating_window_duration = self._eating_window_before(start_time)
        session = FastingSession(
            start_time=start_time,
            end_time=end_time,
            goal_hours=goal_hours if goal_hours is not None else self.goal_hours,
            eating_window_duration=eating_window_duration,
            source=source,
        )
        self._commit(session)
        self._recompute()
        self._save()
        logger.debug("Added %s fast for %s", source, local_day(start_time, self.tz))
        return session

    def delete_session_on(self, day: date) -> bool:
        """Remove the history entry for a calendar day, if any."""
        before = len(self._history)
        self._history = [s for s in self._history if local_day(s.start_time, self.tz) != day]
        if len(self._history) == before:
            return False
        self._recompute()
        self._save()
        return True

    def delete_all(self) -> None:
        """Erase all fasting history and reset both streaks. Not recoverable."""
        count = len(self._history)
        self._history = []
        self._streaks = StreakCounts()
        self._save()
        logger.info("Deleted all fasting history (%d sessions)", count)

    def set_goal_hours(self, hours: float) -> None:
        if hours <= 0:
            raise ValueError(f"Goal must be positive, got {hours}")
        self._settings.fasting_goal_hours = float(hours)
        save_settings(self._settings, self.root)

    # ── External sync ─────────────────────────────────────────

    def merge_external_sessions(
        self,
        sessions: Iterable[FastingSession],
        window_seconds: float = SYNC_WINDOW_SECONDS,
    ) -> int:
        """Merge completed sessions from the health-data bridge.

        A session starting within *window_seconds* of one already in history
        is a duplicate. Later sessions replace earlier ones on the same day,
        so the count returned is of synced sessions still in history.
        """
        synced = set()
        for external in sessions:
            if not external.is_complete:
                continue
            if self.find_near(external.start_time, window_seconds) is not None:
                continue
            session = replace(external, id=new_id(), source=SOURCE_HEALTH)
            replaced = self._commit(session)
            if replaced is not None:
                logger.debug(
                    "Health session for %s replaces %s session %s",
                    local_day(session.start_time, self.tz), replaced.source, replaced.id,
                )
                synced.discard(replaced.id)
            synced.add(session.id)
        added = len(synced)
        if synced:
            self._recompute()
            self._save()
        logger.info("Health sync added %d fasting session(s)", added)
        return added
