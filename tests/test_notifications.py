"""Tests for services.notifications."""

from __future__ import annotations

from datetime import time

import pytest

from mooded.core.models import Habit, NotificationSchedule
from mooded.services.notifications import (
    HabitReminderScheduler,
    InMemoryNotificationCenter,
    MoodReminderScheduler,
    ScheduledReminder,
    SchedulerNotificationCenter,
    habit_reminder_id,
    mood_reminder_id,
)


class FailingCenter(InMemoryNotificationCenter):
    def schedule_daily(self, identifier, at, title, body):
        raise RuntimeError("platform refused")


# ---- mood reminders ----


def test_reconcile_replaces_full_set(mood_reminders, center):
    mood_reminders.reconcile(NotificationSchedule(scheduled_times=["09:00", "15:00"]))
    mood_reminders.reconcile(NotificationSchedule(scheduled_times=["09:00"]))

    assert center.pending_identifiers() == [mood_reminder_id(time(9, 0))]
    assert center.get(mood_reminder_id(time(9, 0))).at == time(9, 0)


def test_reconcile_is_idempotent(mood_reminders, center):
    schedule = NotificationSchedule(scheduled_times=["08:00", "20:00"])
    mood_reminders.reconcile(schedule)
    first = dict(center.reminders)
    mood_reminders.reconcile(schedule)
    assert center.reminders == first


def test_reconcile_uses_fixed_text(mood_reminders, center):
    mood_reminders.reconcile(NotificationSchedule(scheduled_times=["12:00"]))
    reminder = center.get(mood_reminder_id(time(12, 0)))
    assert reminder.title == "Mood Check"
    assert reminder.body == "How are you feeling right now?"


def test_disabled_schedule_clears_mood_reminders(mood_reminders, center):
    mood_reminders.reconcile(NotificationSchedule(scheduled_times=["09:00"]))
    mood_reminders.reconcile(NotificationSchedule(is_enabled=False, scheduled_times=["09:00"]))
    assert center.pending_identifiers() == []


def test_mood_reconcile_leaves_habit_reminders(mood_reminders, habit_reminders, center):
    habit = Habit(name="Read", notification_time="21:00")
    habit_reminders.reconcile(habit)
    mood_reminders.reconcile(NotificationSchedule(scheduled_times=["09:00"]))
    mood_reminders.reconcile(NotificationSchedule(is_enabled=False))
    assert center.pending_identifiers() == [habit_reminder_id(habit.id)]


def test_registration_failures_are_swallowed():
    center = FailingCenter()
    MoodReminderScheduler(center).reconcile(NotificationSchedule(scheduled_times=["09:00"]))
    HabitReminderScheduler(center).reconcile(Habit(name="Read", notification_time="21:00"))
    assert center.pending_identifiers() == []


# ---- habit reminders ----


def test_habit_reminder_remove_all_is_scoped(habit_reminders, center):
    center.schedule_daily(mood_reminder_id(time(9, 0)), time(9, 0), "Mood Check", "body")
    habit_reminders.reconcile(Habit(name="Read", notification_time="21:00"))
    habit_reminders.reconcile(Habit(name="Walk", notification_time="07:00"))

    habit_reminders.remove_all()

    assert center.pending_identifiers() == [mood_reminder_id(time(9, 0))]


def test_in_memory_cancel_all(center):
    center.schedule_daily("a", time(1, 0), "t", "b")
    center.schedule_daily("b", time(2, 0), "t", "b")
    center.cancel_all()
    assert center.pending_identifiers() == []


# ---- APScheduler-backed center ----


@pytest.fixture()
def scheduler_center(local_tz):
    delivered = []
    center = SchedulerNotificationCenter(timezone=local_tz, deliver=delivered.append)
    center.delivered = delivered
    center.start()
    yield center
    center.shutdown()


def test_scheduler_registers_cron_job(scheduler_center):
    scheduler_center.schedule_daily("mood_check_0930", time(9, 30), "Mood Check", "body")

    job = scheduler_center.scheduler.get_job("mood_check_0930")
    assert job is not None
    assert str(job.trigger.fields[job.trigger.FIELD_NAMES.index("hour")]) == "9"
    assert str(job.trigger.fields[job.trigger.FIELD_NAMES.index("minute")]) == "30"


def test_scheduler_replaces_same_identifier(scheduler_center):
    scheduler_center.schedule_daily("habit_1", time(7, 0), "Habit Reminder", "Walk")
    scheduler_center.schedule_daily("habit_1", time(8, 0), "Habit Reminder", "Walk")
    assert scheduler_center.pending_identifiers() == ["habit_1"]


def test_scheduler_cancel_ignores_unknown(scheduler_center):
    scheduler_center.schedule_daily("habit_1", time(7, 0), "Habit Reminder", "Walk")
    scheduler_center.cancel(["habit_1", "habit_unknown"])
    assert scheduler_center.pending_identifiers() == []


def test_scheduler_cancel_all(scheduler_center):
    scheduler_center.schedule_daily("a", time(7, 0), "t", "b")
    scheduler_center.schedule_daily("b", time(8, 0), "t", "b")
    scheduler_center.cancel_all()
    assert scheduler_center.pending_identifiers() == []


def test_scheduler_fire_delivers(scheduler_center):
    reminder = ScheduledReminder("habit_1", time(7, 0), "Habit Reminder", "Walk")
    scheduler_center._fire(reminder)
    assert scheduler_center.delivered == [reminder]


def test_scheduler_fire_swallows_delivery_errors(local_tz):
    def broken(reminder):
        raise OSError("no display")

    center = SchedulerNotificationCenter(timezone=local_tz, deliver=broken)
    center._fire(ScheduledReminder("habit_1", time(7, 0), "Habit Reminder", "Walk"))


def test_full_replace_through_scheduler(scheduler_center):
    scheduler = MoodReminderScheduler(scheduler_center)
    scheduler.reconcile(NotificationSchedule(scheduled_times=["09:00", "15:00"]))
    scheduler.reconcile(NotificationSchedule(scheduled_times=["09:00"]))
    assert scheduler_center.pending_identifiers() == ["mood_check_0900"]
