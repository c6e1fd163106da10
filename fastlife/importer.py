"""Flat-file import for FastLife.

Reads the multi-section text export (see exporter.py), rebuilds typed
records per section and merges them into the matching repositories. A row
whose primary timestamp lies within DUPLICATE_WINDOW_SECONDS of an existing
record is skipped as a duplicate, as is a fasting row followed later in the
file by another row for the same calendar day. Rows that are too short or
fail to parse are dropped without being counted.

File shape:

    === FASTING HISTORY ===
    <header row, discarded>
    "2024-01-10 08:00:00","2024-01-11 00:00:00",16.00,16.0,Yes,
    === WEIGHT TRACKING ===
    ...

Section markers match by substring, so decorated marker lines still count.

Row splitting is deliberately minimal: a double quote toggles quoting and
is dropped, commas split only outside quotes, and fields are stripped.
Doubled quotes are not unescaped and quoted values cannot span lines, since
the file is split into rows before any field parsing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any, Callable

from fastlife.errors import FileAccessError, InvalidFormatError
from fastlife.hooks import run_hooks
from fastlife.models import (
    DrinkEntry,
    FastingSession,
    MoodEntry,
    SleepEntry,
    WeightEntry,
)
from fastlife.tracker import Tracker
from fastlife.workspace import local_day

logger = logging.getLogger(__name__)


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DUPLICATE_WINDOW_SECONDS = 60
SECTION_MARKER = "==="

# Section key -> title substring, in file order
SECTION_TITLES = {
    "fasting": "FASTING HISTORY",
    "weight": "WEIGHT TRACKING",
    "hydration": "HYDRATION TRACKING",
    "sleep": "SLEEP TRACKING",
    "mood": "MOOD & ENERGY",
}
SECTIONS = tuple(SECTION_TITLES)


# ── Results ───────────────────────────────────────────────────


@dataclass
class SectionResult:
    imported: int = 0
    skipped: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"imported": self.imported, "skipped": self.skipped}


@dataclass
class ImportResult:
    sections: dict[str, SectionResult] = field(
        default_factory=lambda: {name: SectionResult() for name in SECTIONS}
    )

    @property
    def total_imported(self) -> int:
        return sum(s.imported for s in self.sections.values())

    @property
    def total_skipped(self) -> int:
        return sum(s.skipped for s in self.sections.values())

    def __getitem__(self, section: str) -> SectionResult:
        return self.sections[section]

    def to_dict(self) -> dict[str, Any]:
        return {
            "sections": {name: s.to_dict() for name, s in self.sections.items()},
            "totalImported": self.total_imported,
            "totalSkipped": self.total_skipped,
        }


@dataclass
class ImportPreview:
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def to_dict(self) -> dict[str, Any]:
        return {"counts": dict(self.counts), "total": self.total}


# ── Field parsing ─────────────────────────────────────────────


def parse_csv_row(row: str) -> list[str]:
    """Split one row on commas outside double quotes.

    'a,"b, c",d' -> ['a', 'b, c', 'd']
    """
    fields = []
    current = []
    in_quotes = False
    for ch in row:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


def parse_timestamp(value: str, tz: tzinfo) -> datetime | None:
    """Parse 'yyyy-MM-dd HH:mm:ss' on the user's local clock."""
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=tz)
    except ValueError:
        return None


def _float(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def _int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def _optional(fields: list[str], index: int, convert: Callable[[str], Any]) -> Any:
    if len(fields) <= index or not fields[index]:
        return None
    return convert(fields[index])


# ── Section splitting ─────────────────────────────────────────


def _section_key(marker_line: str) -> str | None:
    title = marker_line.upper()
    for key, needle in SECTION_TITLES.items():
        if needle in title:
            return key
    return None


def split_sections(text: str) -> dict[str, list[str]]:
    """Group data rows by recognized section, dropping each header row.

    Raises InvalidFormatError when no recognized section marker is present.
    """
    sections: dict[str, list[str]] = {}
    current: str | None = None
    header_pending = False

    for line in text.splitlines():
        if line.startswith(SECTION_MARKER):
            current = _section_key(line)
            header_pending = True
            if current is not None:
                sections.setdefault(current, [])
            continue
        if current is None or not line.strip():
            continue
        if header_pending:
            header_pending = False
            continue
        sections[current].append(line)

    if not sections:
        raise InvalidFormatError("No recognized sections found; expected a FastLife export file.")
    return sections


# ── Row -> record ─────────────────────────────────────────────


def parse_fasting_row(fields: list[str], tz: tzinfo) -> FastingSession | None:
    # start, end, duration (unused), goal hours, met goal (unused), eating window hours
    start = parse_timestamp(fields[0], tz)
    end = parse_timestamp(fields[1], tz)
    goal = _float(fields[3])
    if start is None or end is None or goal is None:
        return None
    eating_hours = _optional(fields, 5, _float)
    return FastingSession(
        start_time=start,
        end_time=end,
        goal_hours=goal,
        eating_window_duration=eating_hours * 3600 if eating_hours is not None else None,
    )


def parse_weight_row(fields: list[str], tz: tzinfo) -> WeightEntry | None:
    date = parse_timestamp(fields[0], tz)
    weight = _float(fields[1])
    if date is None or weight is None:
        return None
    return WeightEntry(
        date=date,
        weight=weight,
        bmi=_optional(fields, 2, _float),
        body_fat=_optional(fields, 3, _float),
    )


def parse_hydration_row(fields: list[str], tz: tzinfo) -> DrinkEntry | None:
    date = parse_timestamp(f"{fields[0]} {fields[1]}", tz)
    amount = _float(fields[3])
    if date is None or amount is None:
        return None
    kind = fields[2].lower()
    drink_type = kind if kind in ("water", "coffee") else "tea"
    return DrinkEntry(drink_type=drink_type, amount=amount, date=date)


def parse_sleep_row(fields: list[str], tz: tzinfo) -> SleepEntry | None:
    bed = parse_timestamp(fields[0], tz)
    wake = parse_timestamp(fields[1], tz)
    if bed is None or wake is None:
        return None
    return SleepEntry(bed_time=bed, wake_time=wake, quality=_optional(fields, 3, _int))


def parse_mood_row(fields: list[str], tz: tzinfo) -> MoodEntry | None:
    date = parse_timestamp(fields[0], tz)
    mood = _int(fields[1])
    energy = _int(fields[2])
    if date is None or mood is None or energy is None:
        return None
    notes = fields[3] if len(fields) > 3 and fields[3] else None
    return MoodEntry(date=date, mood_level=mood, energy_level=energy, notes=notes)


# Section key -> (minimum field count, row parser)
ROW_PARSERS: dict[str, tuple[int, Callable[[list[str], tzinfo], Any]]] = {
    "fasting": (5, parse_fasting_row),
    "weight": (2, parse_weight_row),
    "hydration": (4, parse_hydration_row),
    "sleep": (2, parse_sleep_row),
    "mood": (3, parse_mood_row),
}


# ── Merge ─────────────────────────────────────────────────────


def _is_duplicate(section: str, record: Any, tracker: Tracker) -> bool:
    if section == "fasting":
        found = tracker.fasting.find_near(record.start_time, DUPLICATE_WINDOW_SECONDS)
    else:
        found = getattr(tracker, section).find_near(record.timestamp, DUPLICATE_WINDOW_SECONDS)
    return found is not None


def _commit(section: str, record: Any, tracker: Tracker) -> None:
    if section == "fasting":
        tracker.fasting.add_manual_session(
            record.start_time,
            record.end_time,
            record.goal_hours,
            eating_window_duration=record.eating_window_duration,
            infer_eating_window=False,
        )
    else:
        getattr(tracker, section).add(record)


def _parse_rows(section: str, rows: list[str], tz: tzinfo) -> list[Any]:
    min_fields, parse = ROW_PARSERS[section]
    records = []
    for row in rows:
        fields = parse_csv_row(row)
        if len(fields) < min_fields:
            logger.debug("Dropping %s row with %d field(s): %r", section, len(fields), row)
            continue
        record = parse(fields, tz)
        if record is None:
            logger.debug("Dropping unparsable %s row: %r", section, row)
            continue
        records.append(record)
    return records


def latest_per_day(sessions: list[FastingSession], tz: tzinfo) -> list[FastingSession]:
    """Keep only the last session (in file order) for each local calendar day."""
    last = {local_day(s.start_time, tz): i for i, s in enumerate(sessions)}
    return [s for i, s in enumerate(sessions) if last[local_day(s.start_time, tz)] == i]


def import_section(section: str, rows: list[str], tracker: Tracker) -> SectionResult:
    """Merge one section's rows.

    Fasting rows are first reduced to one per calendar day, the last one
    winning as it would in history; the superseded rows count as skipped.
    """
    records = _parse_rows(section, rows, tracker.tz)
    outcome = SectionResult()
    if section == "fasting":
        kept = latest_per_day(records, tracker.tz)
        superseded = len(records) - len(kept)
        if superseded:
            logger.debug("Skipping %d superseded same-day fasting row(s)", superseded)
        outcome.skipped += superseded
        records = kept
    for record in records:
        if _is_duplicate(section, record, tracker):
            outcome.skipped += 1
            continue
        _commit(section, record, tracker)
        outcome.imported += 1
    logger.info("%s: %d imported, %d skipped", section, outcome.imported, outcome.skipped)
    return outcome


def read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileAccessError(path, str(e)) from e


def preview_file(path: str | Path) -> ImportPreview:
    """Count data rows per recognized section without importing anything."""
    sections = split_sections(read_source(Path(path)))
    return ImportPreview(counts={name: len(sections.get(name, [])) for name in SECTIONS})


def import_from_file(path: str | Path, tracker: Tracker) -> ImportResult:
    """Import an export file into *tracker*, skipping duplicates.

    Raises FileAccessError if the file cannot be read and InvalidFormatError
    if it holds no recognized section; in both cases nothing is imported.
    """
    path = Path(path)
    sections = split_sections(read_source(path))

    result = ImportResult()
    for name in SECTIONS:
        if name in sections:
            result.sections[name] = import_section(name, sections[name], tracker)

    logger.info(
        "Imported %s: %d new, %d duplicate(s) skipped",
        path.name, result.total_imported, result.total_skipped,
    )
    run_hooks("post_import", {"event": "post_import", "result": result.to_dict()}, tracker.root)
    return result
