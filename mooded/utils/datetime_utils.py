# utils/datetime_utils.py

from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional, Union

import pytz

_local_tz = pytz.utc


def get_local_tz():
    return _local_tz


def set_local_tz(name: str):
    """Сменить часовой пояс "локального календаря" (имя IANA)"""
    global _local_tz
    _local_tz = pytz.timezone(name)
    return _local_tz


def now_local(tz=None) -> datetime:
    return datetime.now(tz or _local_tz)


def to_local(dt: datetime, tz=None) -> datetime:
    """Перевести момент времени в локальный пояс. Наивное время считается локальным."""
    tz = tz or _local_tz
    if dt.tzinfo is None:
        return tz.localize(dt)
    return dt.astimezone(tz)


def local_day(dt: datetime, tz=None) -> date:
    """Календарный день, которому принадлежит момент времени"""
    return to_local(dt, tz).date()


def start_of_day(day: Union[date, datetime], tz=None) -> datetime:
    """Локальная полночь для указанного дня (с учётом перехода на летнее время)"""
    tz = tz or _local_tz
    if isinstance(day, datetime):
        day = local_day(day, tz)
    return tz.localize(datetime.combine(day, time.min))


def add_months(day: date, months: int) -> date:
    """Сдвиг даты на N месяцев; число месяца обрезается до длины целевого месяца"""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, days_in_month(year, month)))


def days_in_month(year: int, month: int) -> int:
    if month == 12:
        return 31
    return (date(year, month + 1, 1) - timedelta(days=1)).day


def iter_days(start: date, end: date) -> Iterator[date]:
    """Все дни от start до end включительно"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def iter_months(start: date, end: date) -> Iterator[date]:
    """Первые числа всех месяцев от start до end включительно"""
    current = start.replace(day=1)
    while current <= end:
        yield current
        current = add_months(current, 1)


def parse_time_of_day(value: str) -> time:
    """'HH:MM' -> time. Секунды и дата отбрасываются."""
    parsed = datetime.strptime(value.strip()[:5], "%H:%M")
    return time(parsed.hour, parsed.minute)


def format_time_of_day(value: time) -> str:
    return value.strftime("%H:%M")


def parse_timestamp(value: str, tz=None) -> datetime:
    return to_local(datetime.fromisoformat(value), tz)


def minutes_of(value: time) -> int:
    return value.hour * 60 + value.minute


def time_from_minutes(minutes: int) -> time:
    minutes %= 24 * 60
    return time(minutes // 60, minutes % 60)


def whole_days_between(start: datetime, end: Optional[datetime] = None) -> int:
    end = end or now_local()
    return (end - start).days
