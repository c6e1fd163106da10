"""Flat-file export in the format importer.py reads back."""

from __future__ import annotations

from datetime import datetime, tzinfo
from pathlib import Path

from fastlife.fileio import write_text_atomic
from fastlife.importer import TIMESTAMP_FORMAT
from fastlife.tracker import Tracker


def _fmt(ts: datetime, tz: tzinfo, pattern: str = TIMESTAMP_FORMAT) -> str:
    return ts.astimezone(tz).strftime(pattern)


def _opt(value: float | int | None, pattern: str = "{:.1f}") -> str:
    return pattern.format(value) if value is not None else ""


def render_export(tracker: Tracker) -> str:
    tz = tracker.tz
    lines = [
        "=== FASTING HISTORY ===",
        "Start Time,End Time,Duration (hours),Goal (hours),Met Goal,Eating Window (hours)",
    ]
    for s in tracker.fasting.history():
        lines.append(
            f'"{_fmt(s.start_time, tz)}","{_fmt(s.end_time, tz)}",'
            f"{s.duration / 3600:.2f},{s.effective_goal_hours:.1f},"
            f"{'Yes' if s.met_goal else 'No'},{_opt(s.eating_window_hours, '{:.2f}')}"
        )

    lines += ["", "=== WEIGHT TRACKING ===", "Date,Weight (lbs),BMI,Body Fat %,Source"]
    for w in tracker.weight.entries():
        lines.append(
            f'"{_fmt(w.date, tz)}",{w.weight:.1f},{_opt(w.bmi)},{_opt(w.body_fat)},"{w.source}"'
        )

    lines += ["", "=== HYDRATION TRACKING ===", "Date,Time,Type,Amount (oz)"]
    for d in tracker.hydration.entries():
        lines.append(
            f'"{_fmt(d.date, tz, "%Y-%m-%d")}","{_fmt(d.date, tz, "%H:%M:%S")}",'
            f"{d.drink_type.capitalize()},{d.amount:.1f}"
        )

    lines += ["", "=== SLEEP TRACKING ===", "Bed Time,Wake Time,Duration (hours),Quality (1-5),Source"]
    for e in tracker.sleep.entries():
        lines.append(
            f'"{_fmt(e.bed_time, tz)}","{_fmt(e.wake_time, tz)}",'
            f'{e.duration / 3600:.1f},{_opt(e.quality, "{}")},"{e.source}"'
        )

    lines += ["", "=== MOOD & ENERGY TRACKING ===", "Date,Mood (1-10),Energy (1-10),Notes"]
    for m in tracker.mood.entries():
        # Rows are one line each; the importer cannot read embedded newlines.
        notes = (m.notes or "").replace('"', '""').replace("\r", " ").replace("\n", " ")
        lines.append(f'"{_fmt(m.date, tz)}",{m.mood_level},{m.energy_level},"{notes}"')

    return "\n".join(lines) + "\n"


def export_to_file(tracker: Tracker, path: str | Path) -> Path:
    path = Path(path)
    write_text_atomic(path, render_export(tracker))
    return path
