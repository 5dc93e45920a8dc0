"""Calendar-day helpers.

Every date in Habitline is a calendar day in a single reference timezone
(``APP_TIMEZONE``). "Today" and the day a timestamp falls on are derived here
and nowhere else; the metrics engine only ever receives ``date`` values.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import current_app, has_app_context

DEFAULT_TIMEZONE = "UTC"
_DAY_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}(?:$|[T ])")


def app_timezone() -> ZoneInfo:
    name = DEFAULT_TIMEZONE
    if has_app_context():
        name = current_app.config.get("APP_TIMEZONE") or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"unknown timezone: {name}") from exc


def today_local(now: Optional[datetime] = None) -> date:
    """Return the current calendar day in the reference timezone."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(app_timezone()).date()


def local_day(value: datetime | date) -> date:
    """Calendar day of a stored timestamp (naive values are UTC)."""
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(app_timezone()).date()


def parse_day(value: object) -> date:
    """Coerce ``date``/``datetime``/``YYYY-MM-DD`` input to a ``date``.

    Raises ``ValueError("invalid_date")`` for anything else.
    """
    if isinstance(value, datetime):
        # Aware timestamps land on their day in the reference zone.
        return local_day(value) if value.tzinfo is not None else value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _DAY_PREFIX.match(value.strip()):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise ValueError("invalid_date")


def resolve_day(value: object = None) -> date:
    """Parse an optional request-supplied day, defaulting to today."""
    if value is None or value == "":
        return today_local()
    return parse_day(value)
