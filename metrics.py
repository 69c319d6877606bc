import math
from typing import Iterable, List, Sequence

from days import WEEKDAY_NAMES, day_range, days_between, shift_day, week_days
from schemas import (
    CATEGORIES,
    AnalyticsSummary,
    CategoryStats,
    DayProgress,
    Habit,
    WeekDay,
)

CONSISTENCY_WINDOW_DAYS = 30
GROWTH_WINDOW_DAYS = 7


def percent(part: float, whole: float) -> int:
    """Rounded percentage, half-up; 0 when ``whole`` is 0."""
    if not whole:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))


def _average(values: Sequence[int]) -> int:
    if not values:
        return 0
    return int(math.floor(sum(values) / len(values) + 0.5))


def existing_on(habits: Iterable[Habit], day: str) -> List[Habit]:
    return [h for h in habits if h.created_at <= day]


def day_is_complete(habits: Sequence[Habit], day: str) -> bool:
    existing = existing_on(habits, day)
    return bool(existing) and all(day in h.completed_dates for h in existing)


def completions_between(habits: Iterable[Habit], start: str, end: str) -> int:
    return sum(1 for h in habits for d in h.completed_dates if start <= d <= end)


# -------------------- Daily / Weekly --------------------

def day_progress(habits: Sequence[Habit], today: str) -> DayProgress:
    completed = sum(1 for h in habits if today in h.completed_dates)
    total = len(habits)
    return DayProgress(completed=completed, total=total, percentage=percent(completed, total))


def week_progress(habits: Sequence[Habit], today: str) -> List[WeekDay]:
    out = []
    for name, day in zip(WEEKDAY_NAMES, week_days(today)):
        existing = existing_on(habits, day)
        done = sum(1 for h in existing if day in h.completed_dates)
        out.append(
            WeekDay(
                day=name,
                date=day,
                completed=bool(existing) and done == len(existing),
                percentage=percent(done, len(existing)),
            )
        )
    return out


# -------------------- Trends --------------------

def consistency_score(habits: Sequence[Habit], join_date: str, today: str) -> int:
    window = min(CONSISTENCY_WINDOW_DAYS, max(1, days_between(join_date, today)))
    days = set(day_range(today, window))
    active = {d for h in habits for d in h.completed_dates if d in days}
    return percent(len(active), window)


def weekly_growth(habits: Sequence[Habit], today: str) -> int:
    current_start = shift_day(today, -(GROWTH_WINDOW_DAYS - 1))
    prior_end = shift_day(current_start, -1)
    prior_start = shift_day(prior_end, -(GROWTH_WINDOW_DAYS - 1))
    current = completions_between(habits, current_start, today)
    prior = completions_between(habits, prior_start, prior_end)
    if prior == 0:
        return 100 if current > 0 else 0
    return percent(current - prior, prior)


def overall_progress(habits: Sequence[Habit], today: str) -> int:
    possible = sum(max(1, days_between(h.created_at, today) + 1) for h in habits)
    actual = sum(len(h.completed_dates) for h in habits)
    return percent(actual, possible)


def analytics_summary(habits: Sequence[Habit], join_date: str, today: str) -> AnalyticsSummary:
    categories = []
    for category in CATEGORIES:
        members = [h for h in habits if h.category == category]
        categories.append(
            CategoryStats(
                category=category,
                habits=len(members),
                completions=sum(h.total_completions for h in members),
                average_streak=_average([h.streak for h in members]),
            )
        )
    return AnalyticsSummary(
        completion_rate=percent(sum(1 for h in habits if h.total_completions > 0), len(habits)),
        average_streak=_average([h.streak for h in habits]),
        total_completions=sum(h.total_completions for h in habits),
        consistency_score=consistency_score(habits, join_date, today),
        weekly_growth=weekly_growth(habits, today),
        overall_progress=overall_progress(habits, today),
        categories=categories,
    )
