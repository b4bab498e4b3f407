"""
Аналитика истории настроения и привычек

Все показатели пересчитываются с нуля при каждом вызове линейным
проходом по спискам; кэша нет.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from mooded.core.models import Habit, HabitCompletion, MoodEntry, TimeRange
from mooded.utils.datetime_utils import (
    add_months,
    days_in_month,
    get_local_tz,
    iter_days,
    iter_months,
    local_day,
    now_local,
    start_of_day,
    to_local,
    whole_days_between,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayBucket:
    """Точка графика за календарный день"""
    day: date
    average_mood: float
    completions: int


@dataclass(frozen=True)
class MonthBucket:
    """Точка графика за календарный месяц"""
    month: date
    average_mood: float
    completions_per_day: int


@dataclass(frozen=True)
class Activity:
    """Элемент ленты: запись настроения или отметка привычки"""
    timestamp: datetime
    mood: Optional[MoodEntry] = None
    habit: Optional[Habit] = None
    completion: Optional[HabitCompletion] = None

    @property
    def kind(self) -> str:
        return "mood" if self.mood is not None else "habit"


@dataclass
class HistorySummary:
    time_range: TimeRange
    filter_start: Optional[datetime]
    average_mood: float
    check_in_count: int
    current_streak: int
    completion_rates: Dict[str, float] = field(default_factory=dict)
    trend: list = field(default_factory=list)


def _mean(values: List[int]) -> float:
    return sum(values) / len(values) if values else 0.0


class HistoryAggregator:
    """Сводки по выбранному периоду из записей настроения, привычек и отметок"""

    def __init__(self, moods: Iterable[MoodEntry], habits: Iterable[Habit],
                 completions: Iterable[HabitCompletion],
                 now: Optional[datetime] = None, timezone=None):
        self.timezone = timezone or get_local_tz()
        self.moods = list(moods)
        self.habits = list(habits)
        self.completions = list(completions)
        self.now = to_local(now, self.timezone) if now else now_local(self.timezone)
        self.today = local_day(self.now, self.timezone)

    @classmethod
    def from_stores(cls, mood_store, habit_store, now: Optional[datetime] = None) -> "HistoryAggregator":
        return cls(mood_store.all(), habit_store.habits, habit_store.completions,
                   now=now, timezone=habit_store.timezone)

    # ===== FILTERING =====

    def filter_start(self, time_range: TimeRange) -> Optional[datetime]:
        """Локальная полночь начала периода; None для всего времени"""
        if time_range == TimeRange.WEEK:
            return start_of_day(self.today - timedelta(days=7), self.timezone)
        if time_range == TimeRange.MONTH:
            return start_of_day(add_months(self.today, -1), self.timezone)
        if time_range == TimeRange.YEAR:
            return start_of_day(add_months(self.today, -12), self.timezone)
        return None

    def filtered_moods(self, time_range: TimeRange) -> List[MoodEntry]:
        start = self.filter_start(time_range)
        return [m for m in self.moods if start is None or m.timestamp >= start]

    def filtered_completions(self, time_range: TimeRange) -> List[HabitCompletion]:
        """Отметки существующих привычек за период"""
        start = self.filter_start(time_range)
        habit_ids = {h.id for h in self.habits}
        return [
            c for c in self.completions
            if c.habit_id in habit_ids and (start is None or c.date >= start)
        ]

    def _earliest_day(self) -> date:
        days = [local_day(m.timestamp, self.timezone) for m in self.moods]
        habit_ids = {h.id for h in self.habits}
        days += [local_day(c.date, self.timezone) for c in self.completions if c.habit_id in habit_ids]
        return min(days) if days else self.today

    def _span_start(self, time_range: TimeRange) -> datetime:
        start = self.filter_start(time_range)
        if start is None:
            return start_of_day(self._earliest_day(), self.timezone)
        return start

    # ===== METRICS =====

    def average_mood(self, time_range: TimeRange) -> float:
        """Среднее за период; 0 если записей нет"""
        return _mean([m.rating for m in self.filtered_moods(time_range)])

    def check_in_count(self, time_range: TimeRange) -> int:
        return len(self.filtered_moods(time_range))

    def current_streak(self) -> int:
        """Подряд идущие дни с записями, начиная с сегодняшнего"""
        days = {local_day(m.timestamp, self.timezone) for m in self.moods}
        streak = 0
        current = self.today
        while current in days:
            streak += 1
            current -= timedelta(days=1)
        return streak

    def habit_completion_rate(self, habit: Habit, time_range: TimeRange) -> float:
        """
        100 * отметки за период / число полных дней периода (минимум 1).
        Может превысить 100, если отметки создавались в обход toggle.
        """
        start = self.filter_start(time_range)
        count = sum(
            1 for c in self.completions
            if c.habit_id == habit.id and (start is None or c.date >= start)
        )
        total_days = max(1, whole_days_between(self._span_start(time_range), self.now))
        return count / total_days * 100

    def completion_rates(self, time_range: TimeRange) -> Dict[str, float]:
        return {h.name: self.habit_completion_rate(h, time_range) for h in self.habits}

    # ===== TRENDS =====

    def trend(self, time_range: TimeRange) -> list:
        """Дневные точки для недели/месяца, месячные для года и всего времени"""
        if time_range in (TimeRange.WEEK, TimeRange.MONTH):
            return self.daily_trend(time_range)
        return self.monthly_trend(time_range)

    def daily_trend(self, time_range: TimeRange) -> List[DayBucket]:
        first_day = local_day(self._span_start(time_range), self.timezone)

        ratings: Dict[date, List[int]] = defaultdict(list)
        for mood in self.filtered_moods(time_range):
            ratings[local_day(mood.timestamp, self.timezone)].append(mood.rating)

        completions: Dict[date, int] = defaultdict(int)
        for completion in self.filtered_completions(time_range):
            completions[local_day(completion.date, self.timezone)] += 1

        return [
            DayBucket(day=day, average_mood=_mean(ratings.get(day, [])), completions=completions.get(day, 0))
            for day in iter_days(first_day, self.today)
        ]

    def monthly_trend(self, time_range: TimeRange) -> List[MonthBucket]:
        first_day = local_day(self._span_start(time_range), self.timezone)

        ratings: Dict[date, List[int]] = defaultdict(list)
        for mood in self.filtered_moods(time_range):
            ratings[local_day(mood.timestamp, self.timezone).replace(day=1)].append(mood.rating)

        completions: Dict[date, int] = defaultdict(int)
        for completion in self.filtered_completions(time_range):
            completions[local_day(completion.date, self.timezone).replace(day=1)] += 1

        buckets = []
        for month in iter_months(first_day, self.today):
            month_end = month.replace(day=days_in_month(month.year, month.month))
            days_in_range = (min(month_end, self.today) - max(month, first_day)).days + 1
            buckets.append(MonthBucket(
                month=month,
                average_mood=_mean(ratings.get(month, [])),
                completions_per_day=completions.get(month, 0) // max(1, days_in_range),
            ))
        return buckets

    # ===== FEED & SUMMARY =====

    def activity_feed(self, time_range: TimeRange) -> List[Activity]:
        """Записи настроения и отметки привычек за период, новые первыми"""
        habits_by_id = {h.id: h for h in self.habits}
        activities = [Activity(timestamp=m.timestamp, mood=m) for m in self.filtered_moods(time_range)]
        activities += [
            Activity(timestamp=c.date, habit=habits_by_id[c.habit_id], completion=c)
            for c in self.filtered_completions(time_range)
        ]
        return sorted(activities, key=lambda a: a.timestamp, reverse=True)

    def summarize(self, time_range: TimeRange) -> HistorySummary:
        moods = self.filtered_moods(time_range)
        summary = HistorySummary(
            time_range=time_range,
            filter_start=self.filter_start(time_range),
            average_mood=_mean([m.rating for m in moods]),
            check_in_count=len(moods),
            current_streak=self.current_streak(),
            completion_rates=self.completion_rates(time_range),
            trend=self.trend(time_range),
        )
        logger.debug(
            f"📊 {time_range.value}: avg={summary.average_mood:.2f} "
            f"check-ins={summary.check_in_count} streak={summary.current_streak}"
        )
        return summary
