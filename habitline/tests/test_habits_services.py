"""Tests for Habits domain services: CRUD, completion toggles and metrics."""

from datetime import date, timedelta

import pytest

pytestmark = pytest.mark.integration

from habitline.core.utils.dates import today_local
from habitline.domains.habits.models.habit_models import Habit, HabitCompletion
from habitline.domains.habits.services import (
    complete_habit,
    create_habit,
    delete_habit,
    get_completions_for_date,
    get_habit_detail,
    get_habit_history,
    get_user_stats,
    get_user_trend,
    list_habits,
    recompute_all,
    recompute_habit,
    uncomplete_habit,
    update_habit,
)
from habitline.domains.habits.services.store import CompletionStore
from habitline.extensions import db


# ============== Habit CRUD ==============


class TestHabitService:
    def test_create_habit_defaults(self, app, user_id):
        habit = create_habit(user_id, name="  Read  ")
        assert habit.id is not None
        assert habit.name == "Read"
        assert habit.icon == "⭐"
        assert habit.frequency == "daily"
        assert habit.daily_goal == 1
        assert habit.unit == "times"
        assert habit.reminder_time == "09:00"
        assert (habit.current_streak, habit.best_streak, habit.total_completions) == (0, 0, 0)

    def test_create_habit_validation(self, app, user_id):
        with pytest.raises(ValueError, match="validation_error"):
            create_habit(user_id, name="   ")
        with pytest.raises(ValueError, match="validation_error"):
            create_habit(user_id, name="Read", frequency="hourly")
        with pytest.raises(ValueError, match="validation_error"):
            create_habit(user_id, name="Read", daily_goal=0)

    def test_update_habit(self, app, user_id):
        habit = create_habit(user_id, name="Read", description="pages")
        updated = update_habit(user_id, habit.id, name="Read more", daily_goal=3, description="")
        assert updated.name == "Read more"
        assert updated.daily_goal == 3
        assert updated.description is None

    def test_update_is_user_scoped(self, app, user_id):
        habit = create_habit(user_id, name="Read")
        assert update_habit("intruder", habit.id, name="Mine") is None
        assert delete_habit("intruder", habit.id) is False

    def test_delete_habit_cascades(self, app, user_id):
        habit = create_habit(user_id, name="Read")
        complete_habit(user_id, habit.id, "2024-01-10")
        assert delete_habit(user_id, habit.id) is True
        assert db.session.get(Habit, habit.id) is None
        assert HabitCompletion.query.filter_by(habit_id=habit.id).count() == 0


# ============== Completion toggles ==============


class TestCompletionToggles:
    def test_complete_today_updates_derived_fields(self, app, user_id):
        habit = create_habit(user_id, name="Run")
        today = today_local()
        complete_habit(user_id, habit.id, today - timedelta(days=1))
        changed, fields = complete_habit(user_id, habit.id)

        assert changed is True
        assert fields.current_streak == 2
        assert fields.best_streak == 2
        assert fields.total_completions == 2

        stored = db.session.get(Habit, habit.id)
        db.session.refresh(stored)
        assert (stored.current_streak, stored.best_streak, stored.total_completions) == (2, 2, 2)

    def test_complete_twice_is_idempotent(self, app, user_id):
        habit = create_habit(user_id, name="Run")
        first = complete_habit(user_id, habit.id, "2024-01-10")
        second = complete_habit(user_id, habit.id, "2024-01-10")

        assert first[0] is True
        assert second[0] is False
        assert first[1] == second[1]
        assert HabitCompletion.query.filter_by(habit_id=habit.id).count() == 1

    def test_uncomplete(self, app, user_id):
        habit = create_habit(user_id, name="Run")
        complete_habit(user_id, habit.id)
        changed, fields = uncomplete_habit(user_id, habit.id)
        assert changed is True
        assert fields.current_streak == 0
        assert fields.total_completions == 0

        changed, _ = uncomplete_habit(user_id, habit.id)
        assert changed is False

    def test_toggle_unknown_habit(self, app, user_id):
        with pytest.raises(ValueError, match="not_found"):
            complete_habit(user_id, 999999)

    def test_toggle_rejects_bad_date(self, app, user_id):
        habit = create_habit(user_id, name="Run")
        with pytest.raises(ValueError, match="invalid_date"):
            complete_habit(user_id, habit.id, "tomorrow")

    def test_recompute_survives_failed_persist(self, app, user_id, monkeypatch, caplog):
        habit = create_habit(user_id, name="Run")
        store = CompletionStore()
        store.add_completion(habit.id, user_id, date(2024, 1, 10))
        monkeypatch.setattr(store, "persist_derived_fields", lambda *_: False)

        fields = recompute_habit(user_id, habit.id, reference_date=date(2024, 1, 10), store=store)

        assert fields.current_streak == 1
        assert fields.total_completions == 1
        assert "left stale" in caplog.text


# ============== Read models ==============


class TestReadModels:
    def test_list_habits_with_live_metrics(self, app, user_id):
        reference = date(2024, 1, 21)
        read = create_habit(user_id, name="Read")
        run = create_habit(user_id, name="Run")
        for offset in range(3):
            complete_habit(user_id, read.id, reference - timedelta(days=offset))
        complete_habit(user_id, run.id, reference - timedelta(days=3))

        items = {item["habit"].id: item for item in list_habits(user_id, reference_date=reference)}
        assert items[read.id]["current_streak"] == 3
        assert items[read.id]["success_rate"] == 100
        assert items[read.id]["completed_today"] is True
        assert items[run.id]["current_streak"] == 0
        assert items[run.id]["best_streak"] == 1
        assert items[run.id]["success_rate"] == 25
        assert list_habits("nobody") == []

    def test_get_habit_detail_scoped(self, app, user_id):
        habit = create_habit(user_id, name="Read")
        assert get_habit_detail(user_id, habit.id)["habit"].name == "Read"
        assert get_habit_detail("intruder", habit.id) is None

    def test_completions_for_date(self, app, user_id):
        read = create_habit(user_id, name="Read")
        run = create_habit(user_id, name="Run")
        complete_habit(user_id, read.id, "2024-01-10")

        rows = {row["habit_id"]: row["completed"] for row in get_completions_for_date(user_id, "2024-01-10")}
        assert rows == {read.id: True, run.id: False}

    def test_history(self, app, user_id):
        habit = create_habit(user_id, name="Read")
        complete_habit(user_id, habit.id, "2024-01-09")
        history = get_habit_history(user_id, habit.id, 3, reference_date=date(2024, 1, 10))
        assert history == [
            (date(2024, 1, 8), False),
            (date(2024, 1, 9), True),
            (date(2024, 1, 10), False),
        ]
        with pytest.raises(ValueError, match="invalid_window"):
            get_habit_history(user_id, habit.id, 0)
        with pytest.raises(ValueError, match="not_found"):
            get_habit_history("intruder", habit.id, 3)

    def test_user_stats(self, app, user_id):
        reference = date(2024, 1, 21)
        read = create_habit(user_id, name="Read")
        run = create_habit(user_id, name="Run")
        complete_habit(user_id, read.id, reference)
        complete_habit(user_id, run.id, reference)
        complete_habit(user_id, run.id, reference - timedelta(days=1))

        stats = get_user_stats(user_id, reference_date=reference)
        assert stats["active_habits"] == 2
        assert stats["total_days"] == 2
        assert stats["habits_completed"] == 3
        assert stats["success_rate"] == 100
        assert stats["current_streak"] == 2
        assert stats["best_streak"] == 2
        # Newest habit is listed first and wins the tie.
        assert stats["best_habit"]["id"] == run.id
        assert stats["best_habit"]["success_rate"] == 100

    def test_user_stats_empty(self, app, user_id):
        stats = get_user_stats(user_id)
        assert stats["active_habits"] == 0
        assert stats["success_rate"] == 0
        assert stats["best_habit"] is None

    def test_trend_length(self, app, user_id):
        habit = create_habit(user_id, name="Read")
        today = today_local()
        complete_habit(user_id, habit.id, today)
        trend = get_user_trend(user_id, 7)
        assert len(trend) == 7
        assert trend[-1].date == today
        assert trend[-1].success_rate == 100
        with pytest.raises(ValueError, match="invalid_window"):
            get_user_trend(user_id, 10000)


def test_recompute_all_repairs_stale_columns(app, user_id):
    habit = create_habit(user_id, name="Read")
    complete_habit(user_id, habit.id)
    db.session.query(Habit).filter_by(id=habit.id).update({"current_streak": 42, "total_completions": 0})
    db.session.commit()

    assert recompute_all(user_id) == 1
    stored = db.session.get(Habit, habit.id)
    db.session.refresh(stored)
    assert stored.current_streak == 1
    assert stored.total_completions == 1


def test_user_stats_streaks_match_habit_list(app, user_id):
    reference = date(2024, 6, 1)
    habit = create_habit(user_id, name="Read")
    store = CompletionStore()
    for offset in range(10):
        store.add_completion(habit.id, user_id, date(2023, 1, 1) + timedelta(days=offset))
    store.add_completion(habit.id, user_id, reference)
    db.session.commit()

    items = list_habits(user_id, reference_date=reference)
    stats = get_user_stats(user_id, reference_date=reference)

    assert stats["best_streak"] == max(item["best_streak"] for item in items) == 1
    assert stats["current_streak"] == max(item["current_streak"] for item in items) == 1
    # Lifetime totals still include completions older than the streak history.
    assert stats["total_days"] == 11
    assert stats["habits_completed"] == 11
