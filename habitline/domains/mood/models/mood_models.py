"""Daily mood/focus check-ins."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy.orm import Mapped, mapped_column

from habitline.extensions import db


class DailyMood(db.Model):
    __tablename__ = "mood_daily_entry"
    __table_args__ = (
        db.UniqueConstraint("user_id", "date", name="ux_mood_daily_entry_user_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(db.String(128), index=True, nullable=False)
    entry_date: Mapped[date] = mapped_column("date", nullable=False)
    mood: Mapped[str | None] = mapped_column(db.String(32))
    focus_level: Mapped[int | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)
