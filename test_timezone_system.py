#!/usr/bin/env python3
"""
Tests for the timezone helpers that decide the user's local "today"
"""

from datetime import date, datetime, timezone

import pytest

from habitglass.utils.timezone_utils import (
    get_user_local_today,
    is_time_to_send_reminder,
    parse_utc_offset,
    validate_timezone,
)

# 22:30 UTC on Wednesday 2025-01-08
NOW = datetime(2025, 1, 8, 22, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("UTC+3", 3),
        ("UTC-5", -5),
        ("UTC+0", 0),
        ("UTC+5:30", 5.5),
        ("UTC-12", -12),
        ("invalid", None),
        ("UTC++3", None),
        ("UTC-", None),
        ("UTC+99", None),
    ],
)
def test_timezone_parsing(value, expected):
    assert parse_utc_offset(value) == expected


def test_timezone_validation():
    for valid in ["Europe/Moscow", "America/New_York", "UTC", "UTC+3", "Asia/Kolkata"]:
        assert validate_timezone(valid), valid
    for invalid in ["invalid_timezone", "UTC+", "Mars/Olympus"]:
        assert not validate_timezone(invalid), invalid


def test_local_today_depends_on_zone():
    assert get_user_local_today(None, NOW) == date(2025, 1, 8)
    assert get_user_local_today("UTC+3", NOW) == date(2025, 1, 9)
    assert get_user_local_today("Asia/Tokyo", NOW) == date(2025, 1, 9)
    assert get_user_local_today("America/New_York", NOW) == date(2025, 1, 8)
    # unknown zones fall back to UTC
    assert get_user_local_today("Mars/Olympus", NOW) == date(2025, 1, 8)


def test_reminder_timing():
    assert is_time_to_send_reminder("UTC+0", 22, window_minutes=31, now=NOW)
    assert not is_time_to_send_reminder("UTC+0", 22, now=NOW)
    assert is_time_to_send_reminder("Europe/Berlin", 23, window_minutes=31, now=NOW)
    assert not is_time_to_send_reminder("Asia/Tokyo", 20, window_minutes=60, now=NOW)
