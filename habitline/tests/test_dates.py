"""Calendar-day rules: one timezone, day granularity."""

from datetime import date, datetime, timezone

import pytest

pytestmark = pytest.mark.unit

from habitline.core.utils.dates import local_day, parse_day, resolve_day, today_local


def test_parse_day_accepts_iso_and_timestamps():
    assert parse_day("2024-01-10") == date(2024, 1, 10)
    assert parse_day("2024-01-10T23:59:00Z") == date(2024, 1, 10)
    assert parse_day(" 2024-01-10 ") == date(2024, 1, 10)
    assert parse_day(datetime(2024, 1, 10, 0, 1)) == date(2024, 1, 10)
    assert parse_day(date(2024, 1, 10)) == date(2024, 1, 10)


@pytest.mark.parametrize("value", ["", "2024-13-01", "2024-02-30", "20240110", "Jan 10", None, 20240110])
def test_parse_day_rejects_malformed(value):
    with pytest.raises(ValueError, match="invalid_date"):
        parse_day(value)


def test_today_local_uses_app_timezone(app):
    now = datetime(2024, 1, 10, 23, 30, tzinfo=timezone.utc)
    assert today_local(now) == date(2024, 1, 10)

    app.config["APP_TIMEZONE"] = "Europe/Stockholm"
    assert today_local(now) == date(2024, 1, 11)
    assert local_day(datetime(2024, 1, 10, 23, 30)) == date(2024, 1, 11)


def test_unknown_timezone_is_an_error(app):
    app.config["APP_TIMEZONE"] = "Mars/Olympus"
    with pytest.raises(ValueError):
        today_local()


def test_resolve_day_defaults_to_today(app):
    assert resolve_day(None) == today_local()
    assert resolve_day("") == today_local()
    assert resolve_day("2024-01-10") == date(2024, 1, 10)


def test_aware_datetime_uses_app_timezone(app):
    app.config["APP_TIMEZONE"] = "Asia/Tokyo"
    stamp = datetime(2024, 1, 10, 23, 30, tzinfo=timezone.utc)
    assert parse_day(stamp) == date(2024, 1, 11)
    assert parse_day(stamp) == local_day(stamp)
    # Naive values and plain day strings are taken as given.
    assert parse_day(datetime(2024, 1, 10, 23, 30)) == date(2024, 1, 10)
    assert parse_day("2024-01-10") == date(2024, 1, 10)
