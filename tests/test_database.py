"""Tests for core.database.KeyValueStorage."""

from __future__ import annotations

import json
from pathlib import Path

from mooded.core.database import KeyValueStorage, PersistenceError


def test_load_missing_returns_none(storage):
    assert storage.load("SavedMoods") is None


def test_save_then_load(storage):
    result = storage.save("SavedMoods", [{"id": "1", "rating": 4}])
    assert result.saved
    assert result.error is None
    assert storage.load("SavedMoods") == [{"id": "1", "rating": 4}]


def test_save_writes_human_readable_json(storage):
    storage.save("SavedHabits", [{"name": "Чтение"}])
    text = (storage.data_dir / "SavedHabits.json").read_text(encoding="utf-8")
    assert "Чтение" in text
    assert json.loads(text) == [{"name": "Чтение"}]


def test_save_leaves_no_tmp_file(storage):
    storage.save("SavedMoods", [])
    assert not (storage.data_dir / "SavedMoods.json.tmp").exists()


def test_corrupt_blob_treated_as_absent_and_backed_up(storage):
    storage.data_dir.mkdir(parents=True)
    (storage.data_dir / "SavedMoods.json").write_text("{not json", encoding="utf-8")

    assert storage.load("SavedMoods") is None
    assert not (storage.data_dir / "SavedMoods.json").exists()
    assert len(list(storage.backup_dir.glob("corrupted_SavedMoods_*.json"))) == 1
    assert storage.error_count == 1


def test_empty_blob_is_absent(storage):
    storage.data_dir.mkdir(parents=True)
    (storage.data_dir / "SavedMoods.json").write_text("  ", encoding="utf-8")
    assert storage.load("SavedMoods") is None


def test_save_failure_reported(tmp_path: Path):
    blocker = tmp_path / "data"
    blocker.write_text("a file where the directory should be", encoding="utf-8")
    storage = KeyValueStorage(blocker)

    result = storage.save("SavedMoods", [])

    assert not result
    assert isinstance(result.error, PersistenceError)
    assert result.error.key == "SavedMoods"


def test_unencodable_value_reported(storage):
    result = storage.save("SavedMoods", [object()])
    assert not result.saved
    assert isinstance(result.error, PersistenceError)


def test_remove(storage):
    storage.save("SavedMoods", [])
    assert storage.remove("SavedMoods") is True
    assert storage.remove("SavedMoods") is False
