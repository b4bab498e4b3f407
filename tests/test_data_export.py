"""Tests for services.data_export."""

from __future__ import annotations

from datetime import datetime

import pytz

from mooded.core.models import MoodEntry
from mooded.services.data_export import export_moods_csv, export_to_csv


def test_single_entry(at):
    moods = [MoodEntry.create(4, at(2024, 3, 5, 14, 30))]
    assert export_moods_csv(moods) == "Date,Time,Rating\n2024-03-05,14:30:00,4"


def test_empty_has_header_only():
    assert export_moods_csv([]) == "Date,Time,Rating"


def test_order_is_preserved(at):
    moods = [
        MoodEntry.create(5, at(2024, 3, 6, 8, 0, 5)),
        MoodEntry.create(1, at(2024, 3, 5, 22, 15, 0)),
    ]
    assert export_moods_csv(moods).splitlines()[1:] == [
        "2024-03-06,08:00:05,5",
        "2024-03-05,22:15:00,1",
    ]


def test_time_rendered_in_local_zone():
    # 23:30 UTC is already the next day in Berlin
    utc_instant = pytz.utc.localize(datetime(2024, 3, 5, 23, 30))
    moods = [MoodEntry(id="1", rating=3, timestamp=utc_instant)]
    assert export_moods_csv(moods).splitlines()[1] == "2024-03-06,00:30:00,3"


def test_export_to_csv_writes_file(tmp_path, at):
    moods = [MoodEntry.create(2, at(2024, 3, 5, 9, 0))]
    path = export_to_csv(moods, tmp_path / "exports")
    assert path.name == "MoodHistory.csv"
    assert path.read_text(encoding="utf-8") == "Date,Time,Rating\n2024-03-05,09:00:00,2"
