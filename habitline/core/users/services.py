"""Profile service layer."""

from __future__ import annotations

import logging

from flask import current_app

from habitline.core.users.models import UserProfile
from habitline.core.utils.dates import DEFAULT_TIMEZONE
from habitline.domains.habits.models.habit_models import Habit, HabitCompletion
from habitline.domains.mood.models.mood_models import DailyMood
from habitline.extensions import db

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("first_name", "last_name", "email", "timezone", "language", "profile_image")


def _default_profile(user_id: str) -> UserProfile:
    return UserProfile(
        user_id=user_id,
        first_name="Student",
        last_name="User",
        email=f"{user_id}@example.com",
        timezone=current_app.config.get("APP_TIMEZONE") or DEFAULT_TIMEZONE,
        language=current_app.config.get("DEFAULT_LANGUAGE", "English"),
        profile_image="",
    )


def get_profile(user_id: str) -> UserProfile | None:
    return UserProfile.query.filter_by(user_id=user_id).first()


def get_or_create_profile(user_id: str) -> UserProfile:
    """Return the stored profile, creating the default one on first read."""
    profile = get_profile(user_id)
    if profile is None:
        profile = _default_profile(user_id)
        db.session.add(profile)
        db.session.commit()
    return profile


def update_profile(user_id: str, **fields) -> UserProfile:
    profile = get_profile(user_id) or _default_profile(user_id)
    if profile.id is None:
        db.session.add(profile)
    for key, value in fields.items():
        if key not in _PROFILE_FIELDS or value is None:
            continue
        if key == "profile_image":
            profile.profile_image = value
            continue
        setattr(profile, key, value.strip() or None)
    db.session.commit()
    return profile


def delete_account(user_id: str) -> None:
    """Remove every row owned by ``user_id``."""
    # Bulk deletes bypass ORM cascades, so completions go first.
    completions = HabitCompletion.query.filter_by(user_id=user_id).delete(synchronize_session=False)
    habits = Habit.query.filter_by(user_id=user_id).delete(synchronize_session=False)
    moods = DailyMood.query.filter_by(user_id=user_id).delete(synchronize_session=False)
    UserProfile.query.filter_by(user_id=user_id).delete(synchronize_session=False)
    db.session.commit()
    db.session.expunge_all()
    logger.info(
        "Deleted account %s (habits=%s completions=%s moods=%s)", user_id, habits, completions, moods
    )
