"""
Сервис уведомлений

Платформа уведомлений (NotificationCenter) принимает ежедневные
напоминания по идентификатору и отменяет их. Поверх неё работают два
независимых домена напоминаний:
  - MoodReminderScheduler - проверки настроения, полная замена набора;
  - HabitReminderScheduler - по одному напоминанию на привычку, по ключу.
Ошибки регистрации логируются и не пробрасываются вызывающему коду.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import time
from typing import Callable, Dict, Iterable, List, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from mooded.core.models import Habit, NotificationSchedule
from mooded.utils.datetime_utils import get_local_tz

logger = logging.getLogger(__name__)

MOOD_REMINDER_PREFIX = "mood_check_"
HABIT_REMINDER_PREFIX = "habit_"

DEFAULT_MOOD_TITLE = "Mood Check"
DEFAULT_MOOD_BODY = "How are you feeling right now?"
DEFAULT_HABIT_TITLE = "Habit Reminder"


def mood_reminder_id(at: time) -> str:
    return f"{MOOD_REMINDER_PREFIX}{at.strftime('%H%M')}"


def habit_reminder_id(habit_id: str) -> str:
    return f"{HABIT_REMINDER_PREFIX}{habit_id}"


@dataclass(frozen=True)
class ScheduledReminder:
    """Ежедневное напоминание в hour:minute"""
    identifier: str
    at: time
    title: str
    body: str


# ===== PLATFORM =====

class NotificationCenter(ABC):
    """Платформа локальных уведомлений"""

    @abstractmethod
    def request_authorization(self) -> bool:
        """Однократный запрос разрешения. Результат ни на что не влияет."""

    @abstractmethod
    def schedule_daily(self, identifier: str, at: time, title: str, body: str) -> None:
        """Зарегистрировать (или заменить) ежедневное напоминание"""

    @abstractmethod
    def cancel(self, identifiers: Iterable[str]) -> None:
        """Отменить напоминания по идентификаторам; неизвестные игнорируются"""

    @abstractmethod
    def cancel_all(self) -> None:
        pass

    @abstractmethod
    def pending_identifiers(self) -> List[str]:
        pass


class InMemoryNotificationCenter(NotificationCenter):
    """Платформа без доставки: хранит зарегистрированные напоминания в словаре"""

    def __init__(self):
        self.reminders: Dict[str, ScheduledReminder] = {}
        self.authorization_requests = 0

    def request_authorization(self) -> bool:
        self.authorization_requests += 1
        return True

    def schedule_daily(self, identifier: str, at: time, title: str, body: str) -> None:
        self.reminders[identifier] = ScheduledReminder(identifier, time(at.hour, at.minute), title, body)

    def cancel(self, identifiers: Iterable[str]) -> None:
        for identifier in identifiers:
            self.reminders.pop(identifier, None)

    def cancel_all(self) -> None:
        self.reminders.clear()

    def pending_identifiers(self) -> List[str]:
        return list(self.reminders)

    def get(self, identifier: str) -> Optional[ScheduledReminder]:
        return self.reminders.get(identifier)


def log_delivery(reminder: ScheduledReminder) -> None:
    logger.info(f"🔔 {reminder.title}: {reminder.body}")


class SchedulerNotificationCenter(NotificationCenter):
    """Платформа на APScheduler: одна cron-задача на напоминание"""

    def __init__(self, timezone=None,
                 deliver: Callable[[ScheduledReminder], None] = log_delivery,
                 scheduler: Optional[BackgroundScheduler] = None):
        self.timezone = timezone or get_local_tz()
        self.deliver = deliver
        self.scheduler = scheduler or BackgroundScheduler(timezone=self.timezone)

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("📅 Notification scheduler started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("📅 Notification scheduler stopped")

    def request_authorization(self) -> bool:
        logger.info("🔐 Local notifications do not require authorization")
        return True

    def schedule_daily(self, identifier: str, at: time, title: str, body: str) -> None:
        reminder = ScheduledReminder(identifier, time(at.hour, at.minute), title, body)
        self.scheduler.add_job(
            self._fire,
            CronTrigger(hour=at.hour, minute=at.minute, timezone=self.timezone),
            args=[reminder],
            id=identifier,
            name=title,
            replace_existing=True,
        )
        logger.debug(f"➕ Scheduled {identifier} at {at.strftime('%H:%M')}")

    def cancel(self, identifiers: Iterable[str]) -> None:
        for identifier in identifiers:
            try:
                self.scheduler.remove_job(identifier)
            except JobLookupError:
                continue

    def cancel_all(self) -> None:
        self.scheduler.remove_all_jobs()

    def pending_identifiers(self) -> List[str]:
        return [job.id for job in self.scheduler.get_jobs()]

    def _fire(self, reminder: ScheduledReminder) -> None:
        try:
            self.deliver(reminder)
        except Exception as e:
            logger.error(f"❌ Reminder delivery failed for {reminder.identifier}: {e}")


# ===== RECONCILERS =====

class MoodReminderScheduler:
    """Приводит набор напоминаний о настроении в точное соответствие расписанию"""

    def __init__(self, center: NotificationCenter,
                 title: str = DEFAULT_MOOD_TITLE, body: str = DEFAULT_MOOD_BODY):
        self.center = center
        self.title = title
        self.body = body

    def active_identifiers(self) -> List[str]:
        return [i for i in self.center.pending_identifiers() if i.startswith(MOOD_REMINDER_PREFIX)]

    def reconcile(self, schedule: NotificationSchedule) -> None:
        """Снять все напоминания о настроении и установить новый набор"""
        try:
            self.center.cancel(self.active_identifiers())
        except Exception as e:
            logger.error(f"❌ Cannot clear mood reminders: {e}")

        times = schedule.effective_times()
        for at in times:
            try:
                self.center.schedule_daily(mood_reminder_id(at), at, self.title, self.body)
            except Exception as e:
                logger.error(f"❌ Cannot schedule mood reminder at {at.strftime('%H:%M')}: {e}")

        logger.info(f"📅 Mood reminders reconciled: {len(times)} active")


class HabitReminderScheduler:
    """Напоминания по привычкам, адресуемые по id привычки"""

    def __init__(self, center: NotificationCenter, title: str = DEFAULT_HABIT_TITLE):
        self.center = center
        self.title = title

    def active_identifiers(self) -> List[str]:
        return [i for i in self.center.pending_identifiers() if i.startswith(HABIT_REMINDER_PREFIX)]

    def reconcile(self, habit: Habit) -> None:
        if not habit.wants_reminder:
            self.remove(habit.id)
            return

        try:
            self.center.schedule_daily(
                habit_reminder_id(habit.id), habit.notification_time, self.title, habit.name
            )
        except Exception as e:
            logger.error(f"❌ Cannot schedule reminder for habit {habit.id}: {e}")

    def remove(self, habit_id: str) -> None:
        try:
            self.center.cancel([habit_reminder_id(habit_id)])
        except Exception as e:
            logger.error(f"❌ Cannot cancel reminder for habit {habit_id}: {e}")

    def remove_all(self) -> None:
        try:
            self.center.cancel(self.active_identifiers())
        except Exception as e:
            logger.error(f"❌ Cannot cancel habit reminders: {e}")
