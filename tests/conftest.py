"""Shared fixtures: fixed timezone, tmp-backed storage, in-memory notifications."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
import pytz

from mooded.core.database import KeyValueStorage
from mooded.services.habit_service import HabitStore
from mooded.services.mood_service import MoodStore
from mooded.services.notifications import (
    HabitReminderScheduler,
    InMemoryNotificationCenter,
    MoodReminderScheduler,
)
from mooded.utils import datetime_utils

TZ_NAME = "Europe/Berlin"


@pytest.fixture(autouse=True)
def local_tz():
    previous = datetime_utils.get_local_tz()
    tz = datetime_utils.set_local_tz(TZ_NAME)
    yield tz
    datetime_utils._local_tz = previous


@pytest.fixture()
def at(local_tz):
    """at(2024, 3, 5, 14, 30) -> aware local datetime"""

    def _at(*args) -> datetime:
        return local_tz.localize(datetime(*args))

    return _at


@pytest.fixture()
def storage(tmp_path: Path) -> KeyValueStorage:
    return KeyValueStorage(tmp_path / "data", tmp_path / "backups")


@pytest.fixture()
def center() -> InMemoryNotificationCenter:
    return InMemoryNotificationCenter()


@pytest.fixture()
def mood_store(storage) -> MoodStore:
    return MoodStore(storage)


@pytest.fixture()
def habit_reminders(center) -> HabitReminderScheduler:
    return HabitReminderScheduler(center)


@pytest.fixture()
def mood_reminders(center) -> MoodReminderScheduler:
    return MoodReminderScheduler(center)


@pytest.fixture()
def habit_store(storage, habit_reminders, local_tz) -> HabitStore:
    return HabitStore(storage, habit_reminders, timezone=local_tz)
