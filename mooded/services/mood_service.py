# services/mood_service.py

import logging
from datetime import datetime
from typing import List, Optional

from mooded.core.database import MOODS_KEY, KeyValueStorage, SaveResult
from mooded.core.models import MoodEntry, ValidationError

logger = logging.getLogger(__name__)


class MoodStore:
    """
    Хранилище записей настроения

    Единственный владелец списка записей. Список только дополняется;
    удаление - только полная очистка. Рейтинг проверяет вызывающий код.
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self._moods: List[MoodEntry] = []
        self.last_save: Optional[SaveResult] = None
        self.load()

    @property
    def moods(self) -> List[MoodEntry]:
        return list(self._moods)

    def all(self) -> List[MoodEntry]:
        """Записи в порядке добавления"""
        return list(self._moods)

    def add(self, rating: int, timestamp: Optional[datetime] = None) -> SaveResult:
        entry = MoodEntry.create(rating, timestamp)
        self._moods.append(entry)
        logger.info(f"🙂 Mood {rating} logged at {entry.timestamp.isoformat(timespec='seconds')}")
        return self.save()

    def clear(self) -> SaveResult:
        self._moods.clear()
        logger.info("🗑 Mood history cleared")
        return self.save()

    def recent(self, limit: int = 7) -> List[MoodEntry]:
        """Последние записи, новые первыми"""
        if limit <= 0:
            return []
        return list(reversed(self._moods[-limit:]))

    def overall_average(self) -> float:
        if not self._moods:
            return 0.0
        return sum(m.rating for m in self._moods) / len(self._moods)

    def save(self) -> SaveResult:
        self.last_save = self.storage.save(MOODS_KEY, [m.to_dict() for m in self._moods])
        if not self.last_save:
            logger.warning("⚠️ Moods kept in memory only")
        return self.last_save

    def load(self) -> None:
        data = self.storage.load(MOODS_KEY)
        if not isinstance(data, list):
            self._moods = []
            return

        try:
            self._moods = [MoodEntry.from_dict(item) for item in data]
        except ValidationError as e:
            logger.error(f"❌ Mood history unreadable, starting empty: {e}")
            self._moods = []
            return

        logger.info(f"📂 Loaded {len(self._moods)} mood entries")
