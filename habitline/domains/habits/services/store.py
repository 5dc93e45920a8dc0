"""Completion store: the only place habit completions are read or written.

The store wraps an explicit SQLAlchemy session so callers (services, CLI
commands, tests) decide which session it talks to. Writes are staged on the
session; committing is the caller's unit of work.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from habitline.core.utils.dates import local_day
from habitline.domains.habits.models.habit_models import Habit, HabitCompletion
from habitline.domains.habits.services.metrics import DerivedFields, HabitSnapshot
from habitline.extensions import db

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {"sqlite": sqlite_insert, "postgresql": pg_insert}


class CompletionStore:
    """Read/write access to per-day habit completions for one session."""

    def __init__(self, session=None) -> None:
        self.session = session if session is not None else db.session

    def list_completion_dates(
        self, habit_id: int, user_id: str, since: Optional[date] = None
    ) -> Set[date]:
        stmt = select(HabitCompletion.completion_date).where(
            HabitCompletion.habit_id == habit_id,
            HabitCompletion.user_id == user_id,
        )
        if since is not None:
            stmt = stmt.where(HabitCompletion.completion_date >= since)
        return set(self.session.execute(stmt).scalars())

    def completions_by_habit(
        self,
        user_id: str,
        habit_ids: Iterable[int],
        since: Optional[date] = None,
    ) -> Dict[int, Set[date]]:
        ids = list(habit_ids)
        grouped: Dict[int, Set[date]] = {habit_id: set() for habit_id in ids}
        if not ids:
            return grouped
        stmt = select(HabitCompletion.habit_id, HabitCompletion.completion_date).where(
            HabitCompletion.user_id == user_id,
            HabitCompletion.habit_id.in_(ids),
        )
        if since is not None:
            stmt = stmt.where(HabitCompletion.completion_date >= since)
        for habit_id, completion_date in self.session.execute(stmt):
            grouped[habit_id].add(completion_date)
        return grouped

    def habits_completed_on(self, user_id: str, day: date) -> Set[int]:
        stmt = select(HabitCompletion.habit_id).where(
            HabitCompletion.user_id == user_id,
            HabitCompletion.completion_date == day,
        )
        return set(self.session.execute(stmt).scalars())

    def get_habits(self, user_id: str) -> List[HabitSnapshot]:
        stmt = (
            select(Habit.id, Habit.created_at, Habit.name)
            .where(Habit.user_id == user_id)
            .order_by(Habit.created_at.desc(), Habit.id.desc())
        )
        return [
            HabitSnapshot(id=row.id, created_at=local_day(row.created_at), name=row.name)
            for row in self.session.execute(stmt)
        ]

    def count_completions(self, habit_id: int, user_id: str) -> int:
        stmt = select(func.count(HabitCompletion.id)).where(
            HabitCompletion.habit_id == habit_id,
            HabitCompletion.user_id == user_id,
        )
        return int(self.session.execute(stmt).scalar() or 0)

    def add_completion(self, habit_id: int, user_id: str, day: date, amount: int = 1) -> None:
        """Insert-or-replace the (habit, user, day) completion."""
        values = {
            "habit_id": habit_id,
            "user_id": user_id,
            "completion_date": day,
            "completed_amount": amount,
        }
        dialect = self.session.get_bind().dialect.name
        insert_fn = _UPSERT_DIALECTS.get(dialect)
        if insert_fn is not None:
            stmt = insert_fn(HabitCompletion).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["habit_id", "user_id", "completion_date"],
                set_={"completed_amount": stmt.excluded.completed_amount},
            )
            self.session.execute(stmt)
            return

        try:
            with self.session.begin_nested():
                self.session.add(HabitCompletion(**values))
        except IntegrityError:
            self.session.execute(
                update(HabitCompletion)
                .where(
                    HabitCompletion.habit_id == habit_id,
                    HabitCompletion.user_id == user_id,
                    HabitCompletion.completion_date == day,
                )
                .values(completed_amount=amount)
            )

    def remove_completion(self, habit_id: int, user_id: str, day: date) -> bool:
        result = self.session.execute(
            delete(HabitCompletion).where(
                HabitCompletion.habit_id == habit_id,
                HabitCompletion.user_id == user_id,
                HabitCompletion.completion_date == day,
            )
        )
        return bool(result.rowcount)

    def persist_derived_fields(self, habit_id: int, fields: DerivedFields) -> bool:
        """Write the cached streak columns; failures are logged, not raised."""
        try:
            with self.session.begin_nested():
                self.session.execute(
                    update(Habit)
                    .where(Habit.id == habit_id)
                    .values(
                        current_streak=fields.current_streak,
                        best_streak=fields.best_streak,
                        total_completions=fields.total_completions,
                    )
                )
        except SQLAlchemyError:
            logger.exception("Failed to persist derived fields for habit %s", habit_id)
            return False
        return True
