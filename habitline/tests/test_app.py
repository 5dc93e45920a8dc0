"""App factory smoke tests: health, errors, CLI."""

from __future__ import annotations

import pytest

from habitline.domains.habits.models.habit_models import Habit
from habitline.domains.habits.services import complete_habit, create_habit
from habitline.extensions import db


@pytest.mark.smoke
def test_health(client):
    assert client.get("/health").get_json() == {"ok": True}
    body = client.get("/api/health").get_json()
    assert body["ok"] is True


@pytest.mark.smoke
def test_unknown_route_is_json(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["ok"] is False


@pytest.mark.integration
def test_recompute_streaks_command(app, user_id):
    habit = create_habit(user_id, name="Read")
    complete_habit(user_id, habit.id, "2024-01-10")
    complete_habit(user_id, habit.id, "2024-01-11")
    db.session.query(Habit).filter_by(id=habit.id).update({"best_streak": 0, "current_streak": 0})
    db.session.commit()

    result = app.test_cli_runner().invoke(args=["recompute-streaks", "--user", user_id, "--date", "2024-01-11"])

    assert result.exit_code == 0, result.output
    assert "Updated 1 habits" in result.output
    stored = db.session.get(Habit, habit.id)
    db.session.refresh(stored)
    assert stored.current_streak == 2
    assert stored.best_streak == 2


@pytest.mark.integration
def test_recompute_streaks_rejects_bad_date(app):
    result = app.test_cli_runner().invoke(args=["recompute-streaks", "--date", "soon"])
    assert result.exit_code != 0
