"""Repositories for the simpler tracked domains: weight, sleep, hydration, mood.

Same persistence pattern as fasting history minus the one-per-day rule:
every add appends, re-sorts by primary timestamp descending and rewrites
the store.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Generic, Iterable, Protocol, TypeVar

from fastlife.errors import PersistenceError
from fastlife.fileio import read_json, write_json_atomic
from fastlife.models import (
    SOURCE_HEALTH,
    SOURCE_MANUAL,
    SYNC_WINDOW_SECONDS,
    new_id,
    within_window,
)

logger = logging.getLogger(__name__)


class Entry(Protocol):
    id: str
    source: str

    @property
    def timestamp(self) -> datetime: ...

    def to_dict(self) -> dict[str, Any]: ...


E = TypeVar("E", bound=Entry)


class EntryRepository(Generic[E]):
    """Persisted list of one entry type, most recent first."""

    def __init__(self, path: Path, entry_type: type[E]) -> None:
        self.path = path
        self.entry_type = entry_type
        self._entries: list[E] = self._load()

    def _load(self) -> list[E]:
        data = read_json(self.path)
        try:
            entries = [self.entry_type.from_dict(d) for d in (data.get("entries") or [])]
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(self.path, f"corrupt record ({e})") from e
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries

    def _save(self) -> None:
        write_json_atomic(self.path, {"entries": [e.to_dict() for e in self._entries]})

    def entries(self) -> tuple[E, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def find_near(self, timestamp: datetime, window_seconds: float) -> E | None:
        for entry in self._entries:
            if within_window(entry.timestamp, timestamp, window_seconds):
                return entry
        return None

    def add(self, entry: E) -> E:
        self._entries.append(entry)
        self._entries.sort(key=lambda e: e.timestamp, reverse=True)
        self._save()
        return entry

    def delete_all(self) -> None:
        self._entries = []
        self._save()

    def merge_external(self, entries: Iterable[E], window_seconds: float = SYNC_WINDOW_SECONDS) -> int:
        """Merge entries from the health-data bridge, skipping near-duplicates."""
        added = 0
        for entry in entries:
            if self.find_near(entry.timestamp, window_seconds) is not None:
                continue
            source = SOURCE_HEALTH if entry.source == SOURCE_MANUAL else entry.source
            self._entries.append(replace(entry, id=new_id(), source=source))
            added += 1
        if added:
            self._entries.sort(key=lambda e: e.timestamp, reverse=True)
            self._save()
        logger.info("Health sync added %d %s record(s)", added, self.entry_type.__name__)
        return added
