"""Streak and success-rate metrics over per-day completion dates.

Everything here is a pure function of its arguments: no clock, no database,
no Flask. Callers resolve "today" via ``habitline.core.utils.dates`` and pass
it in as ``reference_date``.

Policy:
- the current streak is anchored at ``reference_date``; if that day is not
  completed the current streak is 0, even when yesterday was completed.
- the success-rate window starts no earlier than the first-ever completion,
  so a young habit is not penalised for days before it was started.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from habitline.core.utils.dates import parse_day

DEFAULT_WINDOW_DAYS = 21
DEFAULT_TREND_DAYS = 30
HISTORY_DAYS = 365

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class StreakSummary:
    current: int
    best: int


@dataclass(frozen=True)
class HabitSnapshot:
    """The slice of a habit the aggregate metrics need."""

    id: int
    created_at: date
    name: Optional[str] = None


@dataclass(frozen=True)
class DerivedFields:
    current_streak: int
    best_streak: int
    total_completions: int


@dataclass(frozen=True)
class UserStats:
    active_habits: int
    total_days: int
    success_rate: int
    best_streak: int
    current_streak: int
    habits_completed: int
    best_habit: Optional[Tuple[int, int]]


@dataclass(frozen=True)
class TrendPoint:
    date: date
    success_rate: int


def normalize_dates(values: Iterable[object]) -> Set[date]:
    """Collapse raw input into a set of calendar days."""
    return {parse_day(value) for value in values}


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer ``numerator / denominator`` with halves rounded up (non-negative inputs)."""
    if denominator <= 0:
        return 0
    return (2 * numerator + denominator) // (2 * denominator)


def percentage(part: int, whole: int) -> int:
    return round_half_up(100 * part, whole)


def _require_positive(value: int, code: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(code)
    return value


def compute_streaks(completion_dates: Iterable[object], reference_date: object) -> StreakSummary:
    days = normalize_dates(completion_dates)
    reference = parse_day(reference_date)
    if not days:
        return StreakSummary(current=0, best=0)

    current = 0
    cursor = reference
    while cursor in days:
        current += 1
        cursor -= _ONE_DAY

    best = 0
    run = 0
    previous: Optional[date] = None
    for day in sorted(days):
        run = run + 1 if previous is not None and day - previous == _ONE_DAY else 1
        best = max(best, run)
        previous = day

    return StreakSummary(current=current, best=best)


def compute_success_rate(
    completion_dates: Iterable[object],
    window_days: int,
    reference_date: object,
) -> int:
    """Percentage of completed days in the trailing window ending at ``reference_date``."""
    window_days = _require_positive(window_days, "invalid_window")
    reference = parse_day(reference_date)
    # Future-dated completions never count toward a past window.
    days = {day for day in normalize_dates(completion_dates) if day <= reference}
    if not days:
        return 0

    window_start = reference - timedelta(days=window_days - 1)
    start = max(window_start, min(days))
    total = (reference - start).days + 1
    completed = sum(1 for day in days if day >= start)
    if completed >= total:
        return 100
    return percentage(completed, total)


def aggregate_user_stats(
    habits: Sequence[HabitSnapshot],
    completions_by_habit: Mapping[int, Iterable[object]],
    reference_date: object,
    window_days: int = DEFAULT_WINDOW_DAYS,
    history_by_habit: Optional[Mapping[int, Iterable[object]]] = None,
) -> UserStats:
    """Roll per-habit metrics up to one user.

    Streaks and rates come from ``completions_by_habit``. ``total_days`` and
    ``habits_completed`` count over ``history_by_habit`` when given, so a
    caller can bound the streak history without shrinking the lifetime totals.
    """
    reference = parse_day(reference_date)
    rates: List[int] = []
    best_streak = 0
    current_streak = 0
    habits_completed = 0
    union: Set[date] = set()
    best_habit: Optional[Tuple[int, int]] = None

    for habit in habits:
        days = normalize_dates(completions_by_habit.get(habit.id, ()))
        rate = compute_success_rate(days, window_days, reference)
        streaks = compute_streaks(days, reference)
        rates.append(rate)
        best_streak = max(best_streak, streaks.best)
        current_streak = max(current_streak, streaks.current)
        if history_by_habit is not None:
            days = normalize_dates(history_by_habit.get(habit.id, ()))
        habits_completed += len(days)
        union |= days
        if rate > (best_habit[1] if best_habit else 0):
            best_habit = (habit.id, rate)

    return UserStats(
        active_habits=len(habits),
        total_days=len(union),
        success_rate=round_half_up(sum(rates), len(rates)) if rates else 0,
        best_streak=best_streak,
        current_streak=current_streak,
        habits_completed=habits_completed,
        best_habit=best_habit,
    )


def compute_trend(
    habits: Sequence[HabitSnapshot],
    completions_by_habit: Mapping[int, Iterable[object]],
    days: int,
    reference_date: object,
) -> List[TrendPoint]:
    """Same-day completion ratio across the habits that existed on each day."""
    days = _require_positive(days, "invalid_window")
    reference = parse_day(reference_date)
    created: Dict[int, date] = {habit.id: parse_day(habit.created_at) for habit in habits}
    done: Dict[int, Set[date]] = {
        habit.id: normalize_dates(completions_by_habit.get(habit.id, ())) for habit in habits
    }

    points: List[TrendPoint] = []
    for offset in range(days - 1, -1, -1):
        day = reference - timedelta(days=offset)
        active = [habit_id for habit_id, created_day in created.items() if created_day <= day]
        completed = sum(1 for habit_id in active if day in done[habit_id])
        points.append(TrendPoint(date=day, success_rate=percentage(completed, len(active))))
    return points


def completion_history(
    completion_dates: Iterable[object],
    days: int,
    reference_date: object,
) -> List[Tuple[date, bool]]:
    days = _require_positive(days, "invalid_window")
    reference = parse_day(reference_date)
    done = normalize_dates(completion_dates)
    return [
        (reference - timedelta(days=offset), reference - timedelta(days=offset) in done)
        for offset in range(days - 1, -1, -1)
    ]
