"""Habit services: CRUD, completion toggles, and streak/rate aggregates."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from flask import current_app, has_app_context

from habitline.core.utils.dates import parse_day, today_local
from habitline.domains.habits.models.habit_models import FREQUENCIES, Habit
from habitline.domains.habits.services.metrics import (
    DEFAULT_TREND_DAYS,
    DEFAULT_WINDOW_DAYS,
    HISTORY_DAYS,
    DerivedFields,
    TrendPoint,
    aggregate_user_stats,
    completion_history,
    compute_streaks,
    compute_success_rate,
    compute_trend,
)
from habitline.domains.habits.services.store import CompletionStore
from habitline.extensions import db

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = (
    "name",
    "icon",
    "icon_color",
    "frequency",
    "daily_goal",
    "unit",
    "description",
    "reminder_enabled",
    "reminder_time",
)


def _config(key: str, default: int) -> int:
    if has_app_context():
        return int(current_app.config.get(key, default))
    return default


def window_days() -> int:
    return _config("STATS_WINDOW_DAYS", DEFAULT_WINDOW_DAYS)


def _range_days(days: Optional[int], default: int) -> int:
    if days is None:
        return default
    if days <= 0 or days > _config("MAX_RANGE_DAYS", HISTORY_DAYS):
        raise ValueError("invalid_window")
    return days


def _history_start(reference: date) -> date:
    return reference - timedelta(days=HISTORY_DAYS - 1)


def _clean(fields: dict) -> dict:
    cleaned = {}
    for key, val in fields.items():
        if isinstance(val, str):
            val = val.strip()
        cleaned[key] = val
    if "name" in cleaned and not cleaned["name"]:
        raise ValueError("validation_error")
    if "frequency" in cleaned and cleaned["frequency"] not in FREQUENCIES:
        raise ValueError("validation_error")
    if "daily_goal" in cleaned and (cleaned["daily_goal"] is None or cleaned["daily_goal"] < 1):
        raise ValueError("validation_error")
    if "description" in cleaned:
        cleaned["description"] = cleaned["description"] or None
    return cleaned


def get_habit(user_id: str, habit_id: int) -> Optional[Habit]:
    return Habit.query.filter_by(id=habit_id, user_id=user_id).first()


def create_habit(
    user_id: str,
    *,
    name: str,
    icon: str | None = None,
    icon_color: str | None = None,
    frequency: str = "daily",
    daily_goal: int = 1,
    unit: str | None = None,
    description: str | None = None,
    reminder_enabled: bool = False,
    reminder_time: str | None = None,
) -> Habit:
    fields = _clean(
        {
            "name": name or "",
            "frequency": frequency or "daily",
            "daily_goal": daily_goal,
            "description": description,
        }
    )
    habit = Habit(
        user_id=user_id,
        name=fields["name"],
        icon=(icon or "").strip() or "⭐",
        icon_color=(icon_color or "").strip(),
        frequency=fields["frequency"],
        daily_goal=fields["daily_goal"],
        unit=(unit or "").strip() or "times",
        description=fields["description"],
        reminder_enabled=bool(reminder_enabled),
        reminder_time=(reminder_time or "").strip() or "09:00",
    )
    db.session.add(habit)
    db.session.commit()
    logger.info("Created habit %s for user %s", habit.id, user_id)
    return habit


def update_habit(user_id: str, habit_id: int, **fields) -> Optional[Habit]:
    habit = get_habit(user_id, habit_id)
    if not habit:
        return None
    changes = _clean({key: fields[key] for key in _EDITABLE_FIELDS if key in fields})
    for key, val in changes.items():
        setattr(habit, key, val)
    db.session.commit()
    return habit


def delete_habit(user_id: str, habit_id: int) -> bool:
    habit = get_habit(user_id, habit_id)
    if not habit:
        return False
    db.session.delete(habit)
    db.session.commit()
    logger.info("Deleted habit %s for user %s", habit_id, user_id)
    return True


def recompute_habit(
    user_id: str,
    habit_id: int,
    *,
    reference_date: Optional[date] = None,
    store: Optional[CompletionStore] = None,
) -> DerivedFields:
    """Recompute and stage the cached streak columns for one habit.

    The caller owns the commit. A failed persist is retried once; the computed
    values are returned either way.
    """
    store = store or CompletionStore()
    reference = reference_date or today_local()
    history = store.list_completion_dates(habit_id, user_id, since=_history_start(reference))
    streaks = compute_streaks(history, reference)
    fields = DerivedFields(
        current_streak=streaks.current,
        best_streak=streaks.best,
        total_completions=store.count_completions(habit_id, user_id),
    )
    if not store.persist_derived_fields(habit_id, fields):
        if not store.persist_derived_fields(habit_id, fields):
            logger.warning("Derived fields for habit %s left stale: %s", habit_id, fields)
    return fields


def _toggle(user_id: str, habit_id: int, day: Optional[object], complete: bool) -> Tuple[bool, DerivedFields]:
    if not get_habit(user_id, habit_id):
        raise ValueError("not_found")
    target = parse_day(day) if day is not None else today_local()
    store = CompletionStore()
    if complete:
        already = target in store.list_completion_dates(habit_id, user_id, since=target)
        store.add_completion(habit_id, user_id, target)
        changed = not already
    else:
        changed = store.remove_completion(habit_id, user_id, target)
    fields = recompute_habit(user_id, habit_id, store=store)
    db.session.commit()
    logger.debug(
        "Habit %s %s for %s (changed=%s): %s",
        habit_id,
        "completed" if complete else "uncompleted",
        target.isoformat(),
        changed,
        fields,
    )
    return changed, fields


def complete_habit(user_id: str, habit_id: int, day: Optional[object] = None) -> Tuple[bool, DerivedFields]:
    """Mark ``day`` (default today) done; a repeat is a no-op reported as unchanged."""
    return _toggle(user_id, habit_id, day, complete=True)


def uncomplete_habit(user_id: str, habit_id: int, day: Optional[object] = None) -> Tuple[bool, DerivedFields]:
    return _toggle(user_id, habit_id, day, complete=False)


def list_habits(user_id: str, *, reference_date: Optional[date] = None) -> List[dict]:
    """Habits newest first, with live streaks and the windowed success rate."""
    reference = reference_date or today_local()
    habits = (
        Habit.query.filter_by(user_id=user_id)
        .order_by(Habit.created_at.desc(), Habit.id.desc())
        .all()
    )
    completions = CompletionStore().completions_by_habit(
        user_id, [h.id for h in habits], since=_history_start(reference)
    )
    window = window_days()
    payload = []
    for habit in habits:
        days = completions.get(habit.id, set())
        streaks = compute_streaks(days, reference)
        payload.append(
            {
                "habit": habit,
                "current_streak": streaks.current,
                "best_streak": streaks.best,
                "success_rate": compute_success_rate(days, window, reference),
                "completed_today": reference in days,
            }
        )
    return payload


def get_habit_detail(user_id: str, habit_id: int, *, reference_date: Optional[date] = None) -> Optional[dict]:
    habit = get_habit(user_id, habit_id)
    if not habit:
        return None
    reference = reference_date or today_local()
    days = CompletionStore().list_completion_dates(habit_id, user_id, since=_history_start(reference))
    streaks = compute_streaks(days, reference)
    return {
        "habit": habit,
        "current_streak": streaks.current,
        "best_streak": streaks.best,
        "success_rate": compute_success_rate(days, window_days(), reference),
        "completed_today": reference in days,
    }


def get_completions_for_date(user_id: str, day: Optional[object] = None) -> List[Dict[str, object]]:
    target = parse_day(day) if day is not None else today_local()
    done = CompletionStore().habits_completed_on(user_id, target)
    habits = (
        Habit.query.filter_by(user_id=user_id)
        .order_by(Habit.created_at.desc(), Habit.id.desc())
        .all()
    )
    return [{"habit_id": habit.id, "completed": habit.id in done} for habit in habits]


def get_habit_history(
    user_id: str,
    habit_id: int,
    days: Optional[int] = None,
    *,
    reference_date: Optional[date] = None,
) -> List[Tuple[date, bool]]:
    if not get_habit(user_id, habit_id):
        raise ValueError("not_found")
    span = _range_days(days, window_days())
    reference = reference_date or today_local()
    since = reference - timedelta(days=span - 1)
    dates = CompletionStore().list_completion_dates(habit_id, user_id, since=since)
    return completion_history(dates, span, reference)


def get_user_stats(user_id: str, *, reference_date: Optional[date] = None) -> dict:
    reference = reference_date or today_local()
    store = CompletionStore()
    habits = store.get_habits(user_id)
    ids = [h.id for h in habits]
    history = store.completions_by_habit(user_id, ids)
    # Streaks use the same bounded history as list/detail; totals use everything.
    start = _history_start(reference)
    recent = {habit_id: {day for day in days if day >= start} for habit_id, days in history.items()}
    stats = aggregate_user_stats(habits, recent, reference, window_days(), history_by_habit=history)

    best_habit = None
    if stats.best_habit:
        habit = get_habit(user_id, stats.best_habit[0])
        best_habit = {
            "id": habit.id,
            "name": habit.name,
            "icon": habit.icon,
            "success_rate": stats.best_habit[1],
        }
    return {
        "active_habits": stats.active_habits,
        "total_days": stats.total_days,
        "success_rate": stats.success_rate,
        "best_streak": stats.best_streak,
        "current_streak": stats.current_streak,
        "habits_completed": stats.habits_completed,
        "best_habit": best_habit,
    }


def get_user_trend(
    user_id: str,
    days: Optional[int] = None,
    *,
    reference_date: Optional[date] = None,
) -> List[TrendPoint]:
    span = _range_days(days, _config("DEFAULT_TREND_DAYS", DEFAULT_TREND_DAYS))
    reference = reference_date or today_local()
    store = CompletionStore()
    habits = store.get_habits(user_id)
    since = reference - timedelta(days=span - 1)
    completions = store.completions_by_habit(user_id, [h.id for h in habits], since=since)
    return compute_trend(habits, completions, span, reference)


def recompute_all(user_id: Optional[str] = None, *, reference_date: Optional[date] = None) -> int:
    """Recompute cached streak columns for every habit (optionally one user's)."""
    query = Habit.query
    if user_id:
        query = query.filter_by(user_id=user_id)
    store = CompletionStore()
    count = 0
    for habit in query.order_by(Habit.id).all():
        recompute_habit(habit.user_id, habit.id, reference_date=reference_date, store=store)
        count += 1
    db.session.commit()
    logger.info("Recomputed derived fields for %s habits", count)
    return count
