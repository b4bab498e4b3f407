#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mooded - точка входа

Собирает хранилища, платформу уведомлений и планировщики, устанавливает
напоминания и держит процесс, пока не придёт сигнал остановки.
"""

import argparse
import logging
import signal
import sys
import threading
from typing import Optional

from mooded import __version__
from mooded.config import AppConfig
from mooded.core.database import KeyValueStorage, SaveResult
from mooded.core.models import TimeRange, ValidationError
from mooded.services.analytics import HistoryAggregator, HistorySummary
from mooded.services.data_export import export_to_csv
from mooded.services.habit_service import HabitStore
from mooded.services.mood_service import MoodStore
from mooded.services.notifications import (
    HabitReminderScheduler,
    InMemoryNotificationCenter,
    MoodReminderScheduler,
    NotificationCenter,
    SchedulerNotificationCenter,
)
from mooded.services.settings_service import NotificationSettingsStore
from mooded.utils.datetime_utils import set_local_tz
from mooded.utils.validators import MAX_RATING, MIN_RATING, is_valid_rating
from mooded.utils.logger import setup_logger

logger = logging.getLogger(__name__)


class MoodedApp:
    """Контейнер приложения: хранилища и напоминания"""

    def __init__(self, config: AppConfig, center: Optional[NotificationCenter] = None):
        self.config = config
        set_local_tz(config.timezone_name)

        if center is None:
            if config.notifications.enabled:
                center = SchedulerNotificationCenter(timezone=config.timezone)
            else:
                logger.warning("⚠️ Notifications disabled - reminders are not registered with the scheduler")
                center = InMemoryNotificationCenter()
        self.center = center

        self.storage = KeyValueStorage(config.storage.data_dir, config.storage.backup_dir)
        self.mood_reminders = MoodReminderScheduler(
            center, config.notifications.mood_title, config.notifications.mood_body
        )
        self.habit_reminders = HabitReminderScheduler(center, config.notifications.habit_title)

        self.moods = MoodStore(self.storage)
        self.habits = HabitStore(self.storage, self.habit_reminders, timezone=config.timezone)
        self.settings = NotificationSettingsStore(self.storage, self.mood_reminders)

    def start(self) -> None:
        """Запрос разрешения и установка всех напоминаний"""
        logger.info(f"⚙️ Configuration: {self.config.to_dict()}")
        granted = self.center.request_authorization()
        logger.info(f"🔐 Notification authorization {'granted' if granted else 'denied'}")

        if isinstance(self.center, SchedulerNotificationCenter):
            self.center.start()

        self.settings.apply()
        for habit in self.habits.habits:
            self.habit_reminders.reconcile(habit)

        logger.info(f"✅ Mooded {__version__} started: {len(self.center.pending_identifiers())} reminders active")

    def stop(self) -> None:
        if isinstance(self.center, SchedulerNotificationCenter):
            self.center.shutdown()
        logger.info(f"📊 Storage stats: {self.storage.get_stats()}")
        logger.info("👋 Mooded stopped")

    def log_mood(self, rating: int) -> SaveResult:
        """Проверка рейтинга на границе ввода; хранилище его не перепроверяет"""
        if not is_valid_rating(rating):
            raise ValidationError(f"rating must be between {MIN_RATING} and {MAX_RATING}")
        return self.moods.add(rating)

    def summary(self, time_range: TimeRange) -> HistorySummary:
        return HistoryAggregator.from_stores(self.moods, self.habits).summarize(time_range)


def _print_summary(summary: HistorySummary) -> None:
    print(f"Range: {summary.time_range.value}")
    print(f"Average mood: {summary.average_mood:.1f} ({summary.check_in_count} check-ins)")
    print(f"Current streak: {summary.current_streak} days")
    for name, rate in summary.completion_rates.items():
        print(f"  {name}: {min(rate, 100.0):.0f}%")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mooded", description="Mood and habit tracker")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("run", help="install reminders and keep them firing")
    sub.add_parser("export", help="write mood history CSV to EXPORT_DIR")

    log = sub.add_parser("log", help="log a mood rating")
    log.add_argument("rating", type=int)

    summary = sub.add_parser("summary", help="print history summary")
    summary.add_argument("--range", choices=[r.value for r in TimeRange], default=TimeRange.WEEK.value)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = AppConfig()
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    config.ensure_directories()
    setup_logger(config)

    command = args.command or "run"
    if command == "export":
        app = MoodedApp(config, center=InMemoryNotificationCenter())
        path = export_to_csv(app.moods.all(), config.storage.export_dir)
        print(path)
        return 0

    if command == "log":
        app = MoodedApp(config, center=InMemoryNotificationCenter())
        try:
            result = app.log_mood(args.rating)
        except ValidationError as e:
            print(f"❌ {e}", file=sys.stderr)
            return 2
        if not result:
            print(f"⚠️ {result.error}", file=sys.stderr)
        return 0

    if command == "summary":
        app = MoodedApp(config, center=InMemoryNotificationCenter())
        _print_summary(app.summary(TimeRange(args.range)))
        return 0

    app = MoodedApp(config)
    stop_event = threading.Event()

    def _handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        stop_event.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    app.start()
    try:
        stop_event.wait()
    finally:
        app.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
