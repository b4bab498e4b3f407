# services/settings_service.py

import logging
from typing import Any

from mooded.core.database import NOTIFICATION_SETTINGS_KEY, KeyValueStorage, SaveResult
from mooded.core.models import NotificationSchedule
from mooded.database.migrations import migrate_notification_settings
from mooded.services.notifications import MoodReminderScheduler

logger = logging.getLogger(__name__)


class NotificationSettingsStore:
    """Настройки проверок настроения. Каждое изменение сохраняется и переустанавливает напоминания."""

    def __init__(self, storage: KeyValueStorage, scheduler: MoodReminderScheduler):
        self.storage = storage
        self.scheduler = scheduler
        self.schedule = self._load()

    def _load(self) -> NotificationSchedule:
        raw = self.storage.load(NOTIFICATION_SETTINGS_KEY)
        if raw is None:
            return NotificationSchedule.default()

        schedule = migrate_notification_settings(raw)
        if schedule.to_dict() != raw:
            self.storage.save(NOTIFICATION_SETTINGS_KEY, schedule.to_dict())
        return schedule

    def apply(self) -> None:
        """Установить напоминания по текущему расписанию (например, при старте)"""
        self.scheduler.reconcile(self.schedule)

    def _commit(self) -> SaveResult:
        result = self.storage.save(NOTIFICATION_SETTINGS_KEY, self.schedule.to_dict())
        self.scheduler.reconcile(self.schedule)
        return result

    def set_enabled(self, enabled: bool) -> SaveResult:
        self.schedule.is_enabled = enabled
        logger.info(f"🔔 Mood reminders {'enabled' if enabled else 'disabled'}")
        return self._commit()

    def add_time(self, value: Any) -> SaveResult:
        if not self.schedule.add_time(value):
            logger.debug(f"Reminder time {value} already scheduled")
        return self._commit()

    def remove_time(self, value: Any) -> SaveResult:
        self.schedule.remove_time(value)
        return self._commit()

    def replace(self, schedule: NotificationSchedule) -> SaveResult:
        self.schedule = schedule
        return self._commit()
