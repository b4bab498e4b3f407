# services/habit_service.py

import logging
from datetime import datetime
from typing import Any, List, Optional

from mooded.core.database import COMPLETIONS_KEY, HABITS_KEY, KeyValueStorage, SaveResult
from mooded.core.models import Habit, HabitCompletion, ValidationError, validate_text
from mooded.services.notifications import HabitReminderScheduler
from mooded.utils.datetime_utils import get_local_tz, local_day, now_local, to_local

logger = logging.getLogger(__name__)


def _combine(*results: SaveResult) -> SaveResult:
    for result in results:
        if not result:
            return result
    return SaveResult.ok()


class HabitStore:
    """
    Хранилище привычек и отметок о выполнении

    Инвариант: не более одной отметки на (habit_id, календарный день).
    Его обеспечивает toggle_completion, уникальность не проверяется отдельно.
    Ссылочная целостность не проверяется: отметка для неизвестной
    привычки создаётся и остаётся до полной очистки.
    """

    def __init__(self, storage: KeyValueStorage, reminders: HabitReminderScheduler, timezone=None):
        self.storage = storage
        self.reminders = reminders
        self.timezone = timezone or get_local_tz()
        self._habits: List[Habit] = []
        self._completions: List[HabitCompletion] = []
        self.load()

    @property
    def habits(self) -> List[Habit]:
        return list(self._habits)

    @property
    def completions(self) -> List[HabitCompletion]:
        return list(self._completions)

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        return next((h for h in self._habits if h.id == habit_id), None)

    # ===== HABITS =====

    def add_habit(self, habit: Habit) -> SaveResult:
        self._habits.append(habit)
        result = self._save_habits()
        self.reminders.reconcile(habit)
        logger.info(f"➕ Habit added: {habit.name}")
        return result

    def update_habit(self, habit: Habit) -> SaveResult:
        """Заменить привычку с тем же id; неизвестный id - без изменений"""
        for index, existing in enumerate(self._habits):
            if existing.id == habit.id:
                self._habits[index] = habit
                result = self._save_habits()
                self.reminders.reconcile(habit)
                logger.info(f"✏️ Habit updated: {habit.name}")
                return result

        logger.debug(f"Habit {habit.id} not found, update skipped")
        return SaveResult.ok()

    def remove_habit(self, habit: Habit) -> SaveResult:
        """Удалить привычку вместе со всеми её отметками и напоминанием"""
        self._habits = [h for h in self._habits if h.id != habit.id]
        self._completions = [c for c in self._completions if c.habit_id != habit.id]
        result = _combine(self._save_habits(), self._save_completions())
        self.reminders.remove(habit.id)
        logger.info(f"🗑 Habit removed: {habit.name}")
        return result

    def save_habit(self, name: str, notification_time: Any = None,
                   habit_id: Optional[str] = None) -> Habit:
        """
        Сохранение из формы редактирования.

        Имя обрезается; пустое имя -> ValidationError, список не меняется.
        Без habit_id создаётся новая привычка, иначе обновляется существующая.
        """
        name = validate_text(name, min_length=1, max_length=100, field_name="name")

        if habit_id is None:
            habit = Habit(name=name, notification_time=notification_time)
            self.add_habit(habit)
        else:
            habit = Habit(id=habit_id, name=name, notification_time=notification_time)
            self.update_habit(habit)
        return habit

    # ===== COMPLETIONS =====

    def _find_completion(self, habit_id: str, date: datetime) -> Optional[HabitCompletion]:
        day = local_day(date, self.timezone)
        return next(
            (c for c in self._completions
             if c.habit_id == habit_id and local_day(c.date, self.timezone) == day),
            None,
        )

    def toggle_completion(self, habit_id: str, date: Optional[datetime] = None) -> SaveResult:
        """Отметить/снять выполнение привычки за календарный день даты"""
        date = to_local(date, self.timezone) if date else now_local(self.timezone)
        existing = self._find_completion(habit_id, date)

        if existing is not None:
            self._completions = [c for c in self._completions if c.id != existing.id]
            logger.debug(f"Habit {habit_id} unmarked for {local_day(date, self.timezone)}")
        else:
            if self.get_habit(habit_id) is None:
                logger.debug(f"Completion recorded for unknown habit {habit_id}")
            self._completions.append(HabitCompletion(habit_id=habit_id, date=date))
            logger.debug(f"Habit {habit_id} marked for {local_day(date, self.timezone)}")

        return self._save_completions()

    def is_completed(self, habit_id: str, date: Optional[datetime] = None) -> bool:
        return self._find_completion(habit_id, date or now_local(self.timezone)) is not None

    def completions_for(self, habit_id: str) -> List[HabitCompletion]:
        return [c for c in self._completions if c.habit_id == habit_id]

    def clear_all(self) -> SaveResult:
        """Очистить привычки и отметки, снять все напоминания о привычках"""
        self._habits.clear()
        self._completions.clear()
        result = _combine(self._save_habits(), self._save_completions())
        self.reminders.remove_all()
        logger.info("🗑 All habits cleared")
        return result

    # ===== PERSISTENCE =====

    def _save_habits(self) -> SaveResult:
        return self.storage.save(HABITS_KEY, [h.to_dict() for h in self._habits])

    def _save_completions(self) -> SaveResult:
        return self.storage.save(COMPLETIONS_KEY, [c.to_dict() for c in self._completions])

    def load(self) -> None:
        self._habits = self._load_list(HABITS_KEY, Habit.from_dict)
        self._completions = self._load_list(COMPLETIONS_KEY, HabitCompletion.from_dict)
        logger.info(f"📂 Loaded {len(self._habits)} habits, {len(self._completions)} completions")

    def _load_list(self, key: str, factory) -> list:
        data = self.storage.load(key)
        if not isinstance(data, list):
            return []
        try:
            return [factory(item) for item in data]
        except ValidationError as e:
            logger.error(f"❌ '{key}' unreadable, starting empty: {e}")
            return []
