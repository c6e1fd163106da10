"""Tests for fastlife/entries.py - weight/sleep/hydration/mood repositories."""

import json

import pytest
from conftest import at

from fastlife.entries import EntryRepository
from fastlife.errors import PersistenceError
from fastlife.models import DrinkEntry, SleepEntry, WeightEntry
from fastlife.workspace import hydration_path, sleep_path, weight_path


def test_add_keeps_most_recent_first(workspace):
    repo = EntryRepository(weight_path(workspace), WeightEntry)
    repo.add(WeightEntry(date=at(10, 7), weight=182))
    repo.add(WeightEntry(date=at(12, 7), weight=180))
    repo.add(WeightEntry(date=at(11, 7), weight=181))
    assert [e.weight for e in repo.entries()] == [180, 181, 182]


def test_no_one_per_day_rule(workspace):
    repo = EntryRepository(hydration_path(workspace), DrinkEntry)
    repo.add(DrinkEntry(drink_type="water", amount=8, date=at(12, 9)))
    repo.add(DrinkEntry(drink_type="water", amount=8, date=at(12, 13)))
    assert len(repo) == 2


def test_entries_reload(workspace):
    path = sleep_path(workspace)
    repo = EntryRepository(path, SleepEntry)
    entry = repo.add(SleepEntry(bed_time=at(11, 23), wake_time=at(12, 7), quality=3))
    reloaded = EntryRepository(path, SleepEntry)
    assert reloaded.entries() == (entry,)
    assert json.loads(path.read_text(encoding="utf-8"))["entries"][0]["quality"] == 3


def test_find_near(workspace):
    repo = EntryRepository(weight_path(workspace), WeightEntry)
    entry = repo.add(WeightEntry(date=at(12, 7), weight=180))
    assert repo.find_near(at(12, 7, 0, 59), 60) is entry
    assert repo.find_near(at(12, 7, 1), 60) is None


def test_delete_all(workspace):
    repo = EntryRepository(weight_path(workspace), WeightEntry)
    repo.add(WeightEntry(date=at(12, 7), weight=180))
    repo.delete_all()
    assert len(EntryRepository(weight_path(workspace), WeightEntry)) == 0


def test_merge_external(workspace):
    repo = EntryRepository(weight_path(workspace), WeightEntry)
    repo.add(WeightEntry(date=at(12, 7), weight=180))
    incoming = [
        WeightEntry(date=at(12, 7, 4), weight=180.2),  # within 300s
        WeightEntry(date=at(13, 7), weight=179.6, id="scale-1"),
        WeightEntry(date=at(11, 7), weight=181.0, source="scale"),
    ]
    assert repo.merge_external(incoming) == 2
    newest = repo.entries()[0]
    assert newest.source == "health"
    assert newest.id != "scale-1"
    assert repo.entries()[-1].source == "scale"


def test_merge_external_default_window_boundary(workspace):
    repo = EntryRepository(weight_path(workspace), WeightEntry)
    repo.add(WeightEntry(date=at(12, 7), weight=180))
    incoming = [
        WeightEntry(date=at(12, 7, 4, 59), weight=180.1),
        WeightEntry(date=at(12, 7, 5), weight=180.2),
    ]
    assert repo.merge_external(incoming) == 1
    assert repo.entries()[0].weight == 180.2


def test_corrupt_store_raises(workspace):
    path = weight_path(workspace)
    path.write_text(json.dumps({"entries": [{"date": "2024-01-12T07:00:00+00:00"}]}), encoding="utf-8")
    with pytest.raises(PersistenceError):
        EntryRepository(path, WeightEntry)
