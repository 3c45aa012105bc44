#!/usr/bin/env python3
"""
Tests for schedules: weekday masks and the eligible-day predicate
"""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from habitglass.schemas.habit import Schedule
from habitglass.services.schedule import (
    build_day_record,
    is_active_weekday,
    is_before_creation,
    is_eligible_day,
    mask_to_weekdays,
    weekdays_to_mask,
)

# Monday..Friday, created on Wednesday 2025-01-08
WORKDAYS = Schedule(active_weekdays={1, 2, 3, 4, 5}, created_at=date(2025, 1, 8))


def test_mask_conversion():
    assert mask_to_weekdays("1111100") == {1, 2, 3, 4, 5}
    assert mask_to_weekdays("0000011") == {6, 0}
    assert mask_to_weekdays("0000000") == frozenset()
    assert mask_to_weekdays(None) == frozenset(range(7))
    assert weekdays_to_mask({0, 6}) == "0000011"
    assert weekdays_to_mask(mask_to_weekdays("1010101")) == "1010101"


def test_schedule_from_mask():
    schedule = Schedule.from_mask("1111100", datetime(2025, 1, 8, 21, 45))
    assert schedule == WORKDAYS


def test_created_at_keeps_wall_clock_date():
    assert Schedule(created_at="2025-01-08T23:30:00+05:00").created_at == date(2025, 1, 8)
    assert Schedule(created_at="2025-01-08").created_at == date(2025, 1, 8)
    assert Schedule(created_at=datetime(2025, 1, 8, 0, 5)).created_at == date(2025, 1, 8)


def test_weekday_out_of_range_is_rejected():
    with pytest.raises(ValidationError):
        Schedule(active_weekdays={7}, created_at=date(2025, 1, 8))


def test_eligible_day():
    assert is_eligible_day(WORKDAYS, date(2025, 1, 8))
    assert is_eligible_day(WORKDAYS, "2025-01-13")
    # Monday, but before the habit existed
    assert not is_eligible_day(WORKDAYS, date(2025, 1, 6))
    # Saturday
    assert not is_eligible_day(WORKDAYS, date(2025, 1, 11))


def test_eligible_day_fails_closed_on_bad_keys():
    assert not is_eligible_day(WORKDAYS, "2025-02-30")
    assert not is_eligible_day(WORKDAYS, "soon")
    assert not is_active_weekday(WORKDAYS, "soon")
    assert not is_before_creation(WORKDAYS, "soon")


def test_empty_schedule_has_no_eligible_days():
    schedule = Schedule(active_weekdays=set(), created_at=date(2025, 1, 1))
    for offset in range(14):
        assert not is_eligible_day(schedule, date(2025, 1, 1 + offset))


def test_eligibility_is_stable():
    results = [is_eligible_day(WORKDAYS, date(2025, 1, 9)) for _ in range(5)]
    assert results == [True] * 5


def test_day_record_flags():
    completions = frozenset({"2025-01-08"})
    before = build_day_record(WORKDAYS, completions, date(2025, 1, 6))
    assert before.active and before.before_creation and not before.eligible
    done = build_day_record(WORKDAYS, completions, date(2025, 1, 8))
    assert done.completed and done.eligible
    weekend = build_day_record(WORKDAYS, completions, date(2025, 1, 11))
    assert not weekend.active and not weekend.eligible
    assert weekend.eligible == is_eligible_day(WORKDAYS, weekend.date)
