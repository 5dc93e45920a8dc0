"""User profile model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from habitline.extensions import db


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)


class UserProfile(db.Model, TimestampMixin):
    __tablename__ = "users_profile"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(db.String(128), unique=True, nullable=False, index=True)
    first_name: Mapped[str | None] = mapped_column(db.String(128))
    last_name: Mapped[str | None] = mapped_column(db.String(128))
    email: Mapped[str | None] = mapped_column(db.String(255))
    timezone: Mapped[str | None] = mapped_column(db.String(64))
    language: Mapped[str | None] = mapped_column(db.String(64))
    profile_image: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
