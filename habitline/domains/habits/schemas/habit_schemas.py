"""Habit DTOs and schemas."""

from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Frequency = Literal["daily", "weekly", "custom"]
_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class HabitCreate(BaseModel):
    # The SPA sends camelCase for a few fields.
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=255)
    icon: Optional[str] = Field(default=None, max_length=64)
    icon_color: Optional[str] = Field(default=None, max_length=64, alias="iconColor")
    frequency: Frequency = "daily"
    daily_goal: int = Field(default=1, ge=1, alias="dailyGoal")
    unit: Optional[str] = Field(default=None, max_length=64)
    description: Optional[str] = Field(default=None, max_length=4096)
    reminder_enabled: bool = False
    reminder_time: Optional[str] = Field(default=None, pattern=_TIME_PATTERN)


class HabitUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    icon: Optional[str] = Field(default=None, max_length=64)
    icon_color: Optional[str] = Field(default=None, max_length=64, alias="iconColor")
    frequency: Optional[Frequency] = None
    daily_goal: Optional[int] = Field(default=None, ge=1, alias="dailyGoal")
    unit: Optional[str] = Field(default=None, max_length=64)
    description: Optional[str] = Field(default=None, max_length=4096)
    reminder_enabled: Optional[bool] = None
    reminder_time: Optional[str] = Field(default=None, pattern=_TIME_PATTERN)


class CompletionRequest(BaseModel):
    date: Optional[str] = None


class HabitResponse(BaseModel):
    id: int
    name: str
    icon: str
    icon_color: str
    frequency: str
    daily_goal: int
    unit: str
    description: Optional[str]
    reminder_enabled: bool
    reminder_time: str
    current_streak: int
    best_streak: int
    total_completions: int
    success_rate: int
    completed_today: bool
    created_at: dt.datetime


class DerivedFieldsResponse(BaseModel):
    current_streak: int
    best_streak: int
    total_completions: int


class HistoryDayResponse(BaseModel):
    date: dt.date
    completed: bool


class CompletionStatusResponse(BaseModel):
    habit_id: int
    completed: bool


class BestHabitResponse(BaseModel):
    id: int
    name: str
    icon: str
    success_rate: int


class UserStatsResponse(BaseModel):
    active_habits: int
    total_days: int
    success_rate: int
    best_streak: int
    current_streak: int
    habits_completed: int
    best_habit: Optional[BestHabitResponse]


class TrendPointResponse(BaseModel):
    date: dt.date
    success_rate: int


def serialize_habit(item: dict) -> dict:
    """Build the JSON shape for one entry of ``list_habits``/``get_habit_detail``."""
    habit = item["habit"]
    return HabitResponse(
        id=habit.id,
        name=habit.name,
        icon=habit.icon,
        icon_color=habit.icon_color,
        frequency=habit.frequency,
        daily_goal=habit.daily_goal,
        unit=habit.unit,
        description=habit.description,
        reminder_enabled=habit.reminder_enabled,
        reminder_time=habit.reminder_time,
        current_streak=item["current_streak"],
        best_streak=item["best_streak"],
        total_completions=habit.total_completions,
        success_rate=item["success_rate"],
        completed_today=item["completed_today"],
        created_at=habit.created_at,
    ).model_dump(mode="json")
