"""Habits models with prefixed tables."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship

from habitline.extensions import db

FREQUENCIES = ("daily", "weekly", "custom")


class Habit(db.Model):
    __tablename__ = "habits_habit"
    __table_args__ = (
        db.CheckConstraint("frequency IN ('daily', 'weekly', 'custom')", name="ck_habits_habit_frequency"),
        db.Index("ix_habits_habit_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(db.String(128), index=True, nullable=False)
    name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    icon: Mapped[str] = mapped_column(db.String(64), nullable=False, default="⭐")
    icon_color: Mapped[str] = mapped_column(db.String(64), nullable=False, default="")
    frequency: Mapped[str] = mapped_column(db.String(16), nullable=False, default="daily")
    daily_goal: Mapped[int] = mapped_column(nullable=False, default=1)
    unit: Mapped[str] = mapped_column(db.String(64), nullable=False, default="times")
    description: Mapped[str | None] = mapped_column(db.Text)
    reminder_enabled: Mapped[bool] = mapped_column(default=False)
    reminder_time: Mapped[str] = mapped_column(db.String(5), nullable=False, default="09:00")

    # Derived by the metrics engine after every completion write.
    current_streak: Mapped[int] = mapped_column(nullable=False, default=0)
    best_streak: Mapped[int] = mapped_column(nullable=False, default=0)
    total_completions: Mapped[int] = mapped_column(nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    completions: Mapped[list["HabitCompletion"]] = relationship(
        "HabitCompletion",
        back_populates="habit",
        cascade="all, delete-orphan",
    )


class HabitCompletion(db.Model):
    __tablename__ = "habits_completion"
    __table_args__ = (
        db.UniqueConstraint(
            "habit_id", "user_id", "completion_date", name="ux_habits_completion_habit_user_date"
        ),
        db.Index("ix_habits_completion_user_date", "user_id", "completion_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    habit_id: Mapped[int] = mapped_column(
        db.ForeignKey("habits_habit.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(db.String(128), nullable=False)
    completion_date: Mapped[date] = mapped_column(nullable=False)
    completed_amount: Mapped[int] = mapped_column(nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    habit: Mapped[Habit] = relationship("Habit", back_populates="completions")
