"""Tests for services.mood_service.MoodStore."""

from __future__ import annotations

from pathlib import Path

from mooded.core.database import KeyValueStorage
from mooded.services.mood_service import MoodStore


def test_add_appends_in_order(mood_store, at):
    mood_store.add(3, at(2024, 3, 1, 9, 0))
    mood_store.add(5, at(2024, 3, 2, 9, 0))
    assert [m.rating for m in mood_store.all()] == [3, 5]


def test_add_uses_current_time(mood_store):
    mood_store.add(4)
    entry = mood_store.all()[0]
    assert entry.timestamp.tzinfo is not None


def test_add_persists(mood_store, storage, at):
    mood_store.add(2, at(2024, 3, 1, 9, 0))
    reloaded = MoodStore(storage)
    assert [m.rating for m in reloaded.all()] == [2]
    assert reloaded.all()[0].timestamp == at(2024, 3, 1, 9, 0)


def test_clear(mood_store, storage):
    mood_store.add(1)
    mood_store.add(2)
    assert mood_store.clear().saved
    assert mood_store.all() == []
    assert MoodStore(storage).all() == []


def test_all_returns_copy(mood_store):
    mood_store.add(3)
    mood_store.all().clear()
    assert len(mood_store.all()) == 1


def test_recent_newest_first(mood_store, at):
    for day, rating in enumerate([1, 2, 3, 4, 5], start=1):
        mood_store.add(rating, at(2024, 3, day, 9, 0))
    assert [m.rating for m in mood_store.recent(3)] == [5, 4, 3]


def test_overall_average(mood_store):
    assert mood_store.overall_average() == 0.0
    mood_store.add(2)
    mood_store.add(5)
    assert mood_store.overall_average() == 3.5


def test_failed_save_keeps_memory_state(tmp_path: Path):
    blocker = tmp_path / "data"
    blocker.write_text("x", encoding="utf-8")
    store = MoodStore(KeyValueStorage(blocker))

    result = store.add(4)

    assert not result.saved
    assert store.last_save is result
    assert [m.rating for m in store.all()] == [4]


def test_unreadable_history_starts_empty(storage):
    storage.save("SavedMoods", [{"id": "1"}])
    assert MoodStore(storage).all() == []
