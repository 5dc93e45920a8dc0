"""Mood service: one row per user per day."""

from datetime import date

import pytest

pytestmark = pytest.mark.integration

from habitline.domains.mood.models.mood_models import DailyMood
from habitline.domains.mood.services.mood_service import get_mood, mood_history, save_mood


def test_save_same_day_twice_replaces(app, user_id):
    first = save_mood(user_id, mood="happy", focus_level=8, day="2024-01-10")
    second = save_mood(user_id, mood="tired", focus_level=2, day="2024-01-10")

    assert first.id == second.id
    assert DailyMood.query.filter_by(user_id=user_id).count() == 1
    stored = get_mood(user_id, date(2024, 1, 10))
    assert (stored.mood, stored.focus_level) == ("tired", 2)


def test_save_over_row_loaded_in_session(app, user_id):
    save_mood(user_id, mood="calm", day="2024-01-10")
    loaded = get_mood(user_id, "2024-01-10")
    assert loaded.mood == "calm"

    updated = save_mood(user_id, mood="", focus_level=5, day="2024-01-10")
    assert updated is loaded
    assert updated.mood is None
    assert updated.focus_level == 5


def test_focus_out_of_range(app, user_id):
    with pytest.raises(ValueError, match="validation_error"):
        save_mood(user_id, focus_level=11)


def test_history_window(app, user_id):
    for day in ("2024-01-01", "2024-01-08", "2024-01-10"):
        save_mood(user_id, mood="ok", day=day)
    entries = mood_history(user_id, 3, reference_date=date(2024, 1, 10))
    assert [entry.entry_date for entry in entries] == [date(2024, 1, 8), date(2024, 1, 10)]
    with pytest.raises(ValueError, match="invalid_window"):
        mood_history(user_id, 0)
