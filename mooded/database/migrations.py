# database/migrations.py

import logging
from datetime import time
from typing import Any, Dict, List, Optional

from mooded.core.models import (
    NotificationSchedule,
    ReminderFrequency,
    ReminderWindow,
    ValidationError,
)
from mooded.utils.datetime_utils import minutes_of, time_from_minutes

logger = logging.getLogger(__name__)

# Якорь для перевода частоты в конкретные времена суток
FREQUENCY_ANCHOR = time(9, 0)


def _pick(data: Dict[str, Any], *keys: str, default=None):
    for key in keys:
        if key in data:
            return data[key]
    return default


def frequency_to_times(frequency: ReminderFrequency, anchor: time = FREQUENCY_ANCHOR) -> List[time]:
    """6 часов -> 4 времени в сутки от якоря, 12 -> 2, 24 -> 1"""
    start = minutes_of(anchor)
    step = frequency.hours * 60
    return [time_from_minutes(start + step * i) for i in range(24 // frequency.hours)]


def migrate_notification_settings(data: Optional[Dict[str, Any]]) -> NotificationSchedule:
    """
    Приводит сохранённые настройки уведомлений к текущей форме.

    Поддерживаемые формы:
      - {"is_enabled", "scheduled_times"} - текущая
      - {"isEnabled", "frequency": "6 hours" | "12 hours" | "24 hours"}
      - {"isEnabled", "startTime", "endTime", "numberOfChecks"}
    Нераспознанные данные -> расписание по умолчанию.
    """
    if not isinstance(data, dict):
        return NotificationSchedule.default()

    is_enabled = bool(_pick(data, "is_enabled", "isEnabled", default=True))

    try:
        if "scheduled_times" in data or "scheduledTimes" in data:
            times = _pick(data, "scheduled_times", "scheduledTimes", default=[])
            return NotificationSchedule(is_enabled=is_enabled, scheduled_times=list(times))

        if "frequency" in data:
            frequency = ReminderFrequency(data["frequency"])
            logger.info(f"🔄 Migrating notification settings from frequency '{frequency.value}'")
            return NotificationSchedule(is_enabled=is_enabled, scheduled_times=frequency_to_times(frequency))

        if "start_time" in data or "startTime" in data:
            window = ReminderWindow(
                start=_pick(data, "start_time", "startTime"),
                end=_pick(data, "end_time", "endTime"),
                count=int(_pick(data, "number_of_checks", "numberOfChecks", default=1)),
            )
            logger.info(f"🔄 Migrating notification settings from window {window}")
            return NotificationSchedule(is_enabled=is_enabled, scheduled_times=window.effective_times())
    except (ValidationError, ValueError, TypeError) as e:
        logger.warning(f"⚠️ Unreadable notification settings, using defaults: {e}")
        return NotificationSchedule.default()

    logger.warning("⚠️ Unknown notification settings shape, using defaults")
    return NotificationSchedule.default()
