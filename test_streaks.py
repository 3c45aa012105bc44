#!/usr/bin/env python3
"""
Tests for the streak calculator
"""

from datetime import date, timedelta

from habitglass.schemas.habit import Schedule
from habitglass.services.streaks import calculate_streak
from habitglass.utils.dates import to_local_date_key

DAILY = Schedule(created_at=date(2025, 1, 1))
TODAY = date(2025, 1, 20)


def keys(start: date, end: date) -> frozenset:
    days = (end - start).days + 1
    return frozenset(to_local_date_key(start + timedelta(days=i)) for i in range(days))


def test_consecutive_days_up_to_today():
    assert calculate_streak(DAILY, keys(date(2025, 1, 15), TODAY), TODAY) == 6


def test_streak_stops_at_first_miss():
    """k completed eligible days, then a miss on the (k+1)-th"""
    completions = keys(date(2025, 1, 12), date(2025, 1, 14)) | keys(date(2025, 1, 16), TODAY)
    assert calculate_streak(DAILY, completions, TODAY) == 5


def test_open_today_does_not_reset_streak():
    completions = keys(date(2025, 1, 16), date(2025, 1, 19))
    yesterday = TODAY - timedelta(days=1)
    assert calculate_streak(DAILY, completions, TODAY) == 4
    assert calculate_streak(DAILY, completions, TODAY) == calculate_streak(DAILY, completions, yesterday)


def test_completed_today_after_a_miss():
    completions = frozenset({"2025-01-20", "2025-01-18"})
    assert calculate_streak(DAILY, completions, TODAY) == 1


def test_unscheduled_days_are_skipped():
    # Monday/Wednesday/Friday, today is Tuesday 2025-01-14
    schedule = Schedule(active_weekdays={1, 3, 5}, created_at=date(2025, 1, 1))
    completions = frozenset({"2025-01-06", "2025-01-08", "2025-01-10", "2025-01-13"})
    assert calculate_streak(schedule, completions, date(2025, 1, 14)) == 4


def test_streak_stops_at_creation_date():
    schedule = Schedule(created_at=date(2025, 1, 17))
    # completions before creation never count
    completions = keys(date(2025, 1, 10), TODAY)
    assert calculate_streak(schedule, completions, TODAY) == 4


def test_degenerate_schedules_give_zero():
    empty = Schedule(active_weekdays=set(), created_at=date(2025, 1, 1))
    assert calculate_streak(empty, keys(date(2025, 1, 1), TODAY), TODAY) == 0
    future = Schedule(created_at=date(2025, 2, 1))
    assert calculate_streak(future, keys(date(2025, 1, 1), TODAY), TODAY) == 0


def test_scan_bound_returns_partial_streak():
    schedule = Schedule(created_at=date(2000, 1, 1))
    completions = keys(date(2024, 1, 1), TODAY)
    assert calculate_streak(schedule, completions, TODAY, limit=5) == 5


def test_garbage_in_completions_is_ignored():
    completions = frozenset({"2025-01-20", "2025-01-19", "yesterday", "2025-01-1"})
    assert calculate_streak(DAILY, completions, TODAY) == 2


def test_streak_is_idempotent():
    completions = keys(date(2025, 1, 3), date(2025, 1, 18))
    first = calculate_streak(DAILY, completions, TODAY)
    assert first == calculate_streak(DAILY, completions, TODAY)
    assert first == 0
