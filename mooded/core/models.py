#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mooded - Core Data Models
Модели данных с валидацией и сериализацией

Записи настроения, привычки, отметки о выполнении и расписание напоминаний.
"""

import uuid
from datetime import datetime, time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Iterable

from mooded.utils.datetime_utils import (
    format_time_of_day,
    minutes_of,
    now_local,
    parse_time_of_day,
    parse_timestamp,
    time_from_minutes,
    to_local,
)

# ===== ENUMS =====

class TimeRange(Enum):
    """Периоды истории"""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"

class ReminderFrequency(Enum):
    """Частота напоминаний (устаревший формат настроек)"""
    SIX_HOURS = "6 hours"
    TWELVE_HOURS = "12 hours"
    TWENTY_FOUR_HOURS = "24 hours"

    @property
    def hours(self) -> int:
        return {
            ReminderFrequency.SIX_HOURS: 6,
            ReminderFrequency.TWELVE_HOURS: 12,
            ReminderFrequency.TWENTY_FOUR_HOURS: 24,
        }[self]

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass

def validate_text(text: str, min_length: int = 1, max_length: int = 100, field_name: str = "text") -> str:
    """Валидация текстовых полей, возвращает обрезанное значение"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} must be a string")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} must contain at least {min_length} characters")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} must contain at most {max_length} characters")

    return text

def validate_time_of_day(value: Any, field_name: str = "time") -> Optional[time]:
    """Приводит 'HH:MM' / time / datetime к time(hour, minute)"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return time(value.hour, value.minute)
    if isinstance(value, time):
        return time(value.hour, value.minute)
    if isinstance(value, str):
        try:
            return parse_time_of_day(value)
        except ValueError:
            raise ValidationError(f"{field_name} has invalid format: {value!r}")
    raise ValidationError(f"{field_name} must be a time of day")

def new_id() -> str:
    return str(uuid.uuid4())

# ===== CORE MODELS =====

@dataclass(frozen=True)
class MoodEntry:
    """Запись настроения. Неизменяема после создания."""
    id: str
    rating: int
    timestamp: datetime

    @classmethod
    def create(cls, rating: int, timestamp: Optional[datetime] = None) -> "MoodEntry":
        return cls(id=new_id(), rating=rating, timestamp=to_local(timestamp) if timestamp else now_local())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "rating": self.rating,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MoodEntry":
        try:
            return cls(
                id=str(data["id"]),
                rating=int(data["rating"]),
                timestamp=parse_timestamp(data["timestamp"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Cannot load mood entry: {e}")

@dataclass
class Habit:
    """Ежедневная привычка с необязательным временем напоминания"""
    name: str
    id: str = field(default_factory=new_id)
    is_enabled: bool = True
    notification_time: Optional[time] = None

    def __post_init__(self):
        self.name = validate_text(self.name, min_length=1, max_length=100, field_name="name")
        self.notification_time = validate_time_of_day(self.notification_time, "notification_time")

    @property
    def wants_reminder(self) -> bool:
        return self.is_enabled and self.notification_time is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_enabled": self.is_enabled,
            "notification_time": (
                format_time_of_day(self.notification_time) if self.notification_time else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        try:
            return cls(
                id=str(data["id"]),
                name=data["name"],
                is_enabled=bool(data.get("is_enabled", True)),
                notification_time=data.get("notification_time"),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValidationError(f"Cannot load habit: {e}")

@dataclass(frozen=True)
class HabitCompletion:
    """Отметка "привычка выполнена в календарный день, содержащий date"."""
    habit_id: str
    date: datetime
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "habit_id": self.habit_id,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HabitCompletion":
        try:
            return cls(
                id=str(data["id"]),
                habit_id=str(data["habit_id"]),
                date=parse_timestamp(data["date"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Cannot load habit completion: {e}")

# ===== NOTIFICATION SCHEDULE =====

def _normalize_times(values: Iterable[Any]) -> List[time]:
    unique = {validate_time_of_day(v, "scheduled_time") for v in values}
    return sorted(unique)

@dataclass
class NotificationSchedule:
    """Расписание проверок настроения: набор времён суток"""
    is_enabled: bool = True
    scheduled_times: List[time] = field(default_factory=list)

    def __post_init__(self):
        self.scheduled_times = _normalize_times(self.scheduled_times)

    @classmethod
    def default(cls) -> "NotificationSchedule":
        """Включено, одна проверка в 09:00"""
        return cls(is_enabled=True, scheduled_times=[time(9, 0)])

    def effective_times(self) -> List[time]:
        """Времена, которые должны быть зарегистрированы"""
        if not self.is_enabled:
            return []
        return list(self.scheduled_times)

    def add_time(self, value: Any) -> bool:
        """Добавить время; False если такое уже есть"""
        slot = validate_time_of_day(value, "scheduled_time")
        if slot in self.scheduled_times:
            return False
        self.scheduled_times = _normalize_times(self.scheduled_times + [slot])
        return True

    def remove_time(self, value: Any) -> bool:
        slot = validate_time_of_day(value, "scheduled_time")
        if slot not in self.scheduled_times:
            return False
        self.scheduled_times = [t for t in self.scheduled_times if t != slot]
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_enabled": self.is_enabled,
            "scheduled_times": [format_time_of_day(t) for t in self.scheduled_times],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotificationSchedule":
        return cls(
            is_enabled=bool(data.get("is_enabled", True)),
            scheduled_times=list(data.get("scheduled_times", [])),
        )

@dataclass
class ReminderWindow:
    """
    Альтернативная политика: N проверок, равномерно распределённых
    между start и end.

    Шаг в минутах = (end - start) // (count - 1). Целочисленное деление
    может оставить зазор между последним временем и end.
    """
    start: time
    end: time
    count: int

    def __post_init__(self):
        self.start = validate_time_of_day(self.start, "start")
        self.end = validate_time_of_day(self.end, "end")

    def effective_times(self) -> List[time]:
        if self.count <= 0:
            return []
        if self.count == 1:
            return [self.start]

        start_minutes = minutes_of(self.start)
        step = (minutes_of(self.end) - start_minutes) // (self.count - 1)
        return [time_from_minutes(start_minutes + step * i) for i in range(self.count)]
