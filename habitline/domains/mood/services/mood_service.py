"""Daily mood/focus check-ins: one entry per user per day."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from habitline.core.utils.dates import resolve_day
from habitline.domains.mood.models.mood_models import DailyMood
from habitline.extensions import db

logger = logging.getLogger(__name__)

FOCUS_RANGE = (1, 10)

_UPSERT_DIALECTS = {"sqlite": sqlite_insert, "postgresql": pg_insert}


def _upsert(user_id: str, target: date, mood: str | None, focus_level: int | None) -> None:
    """Insert-or-replace the (user, day) row in one statement."""
    now = datetime.utcnow()
    insert_fn = _UPSERT_DIALECTS.get(db.session.get_bind().dialect.name)
    if insert_fn is not None:
        # Keyed by attribute: the "date" column is mapped as ``entry_date``.
        stmt = insert_fn(DailyMood).values(
            {
                DailyMood.user_id: user_id,
                DailyMood.entry_date: target,
                DailyMood.mood: mood,
                DailyMood.focus_level: focus_level,
                DailyMood.updated_at: now,
            }
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DailyMood.user_id, DailyMood.entry_date],
            set_={
                DailyMood.mood: mood,
                DailyMood.focus_level: focus_level,
                DailyMood.updated_at: now,
            },
        )
        db.session.execute(stmt)
        return

    try:
        with db.session.begin_nested():
            db.session.add(
                DailyMood(user_id=user_id, entry_date=target, mood=mood, focus_level=focus_level)
            )
    except IntegrityError:
        db.session.execute(
            update(DailyMood)
            .where(DailyMood.user_id == user_id, DailyMood.entry_date == target)
            .values(mood=mood, focus_level=focus_level, updated_at=now)
        )


def save_mood(
    user_id: str,
    *,
    mood: str | None = None,
    focus_level: int | None = None,
    day: object = None,
) -> DailyMood:
    """Create or replace the entry for ``day`` (default today)."""
    if focus_level is not None and not (FOCUS_RANGE[0] <= focus_level <= FOCUS_RANGE[1]):
        raise ValueError("validation_error")
    target = resolve_day(day)
    _upsert(user_id, target, (mood or "").strip() or None, focus_level)
    db.session.commit()
    logger.debug("Saved mood for user %s on %s", user_id, target.isoformat())
    return (
        DailyMood.query.filter_by(user_id=user_id, entry_date=target)
        .populate_existing()
        .one()
    )


def get_mood(user_id: str, day: object = None) -> Optional[DailyMood]:
    return DailyMood.query.filter_by(user_id=user_id, entry_date=resolve_day(day)).first()


def mood_history(user_id: str, days: int, *, reference_date: Optional[date] = None) -> List[DailyMood]:
    if days <= 0:
        raise ValueError("invalid_window")
    reference = reference_date or resolve_day()
    since = reference - timedelta(days=days - 1)
    return (
        DailyMood.query.filter_by(user_id=user_id)
        .filter(DailyMood.entry_date >= since, DailyMood.entry_date <= reference)
        .order_by(DailyMood.entry_date.asc())
        .all()
    )
