"""Mood/focus DTOs."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MoodSave(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mood: Optional[str] = Field(default=None, max_length=32)
    focus_level: Optional[int] = Field(default=None, ge=1, le=10, alias="focusLevel")
    date: Optional[str] = None


class MoodResponse(BaseModel):
    date: dt.date
    mood: Optional[str]
    focus_level: Optional[int]


def serialize_mood(entry) -> dict:
    return MoodResponse(
        date=entry.entry_date,
        mood=entry.mood,
        focus_level=entry.focus_level,
    ).model_dump(mode="json")
