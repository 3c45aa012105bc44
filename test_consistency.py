#!/usr/bin/env python3
"""
Tests for the consistency glass: fill, miss penalties and capacity
"""

from datetime import date, timedelta

import pytest

from habitglass.schemas.habit import Schedule
from habitglass.services.consistency import (
    compute_glass_fill,
    consistency_report,
    fill_ratio,
    glass_capacity,
    incremental_penalty,
    miss_penalty,
)
from habitglass.utils.dates import to_local_date_key

DAILY = Schedule(created_at=date(2025, 1, 1))


def test_penalty_function():
    assert [miss_penalty(n) for n in range(0, 5)] == [0, 0, 1, 4, 9]
    assert [incremental_penalty(n) for n in range(1, 6)] == [0, 1, 3, 5, 7]
    # marginal term is 2n - 3 from the second miss on
    for n in range(2, 20):
        assert incremental_penalty(n) == 2 * n - 3


def test_compounding_penalty_walkthrough():
    """Days 1-2 done, days 3-5 missed, day 6 done"""
    completions = frozenset({"2025-01-01", "2025-01-02", "2025-01-06"})
    expected = {2: 2, 3: 2, 4: 1, 5: 0, 6: 1}
    for day, fill in expected.items():
        assert compute_glass_fill(DAILY, completions, date(2025, 1, day)) == fill


def test_single_misses_are_forgiven():
    today = date(2025, 1, 20)
    missed = {"2025-01-03", "2025-01-07", "2025-01-12"}
    completions = frozenset(
        to_local_date_key(date(2025, 1, 1) + timedelta(days=i)) for i in range(20)
    ) - missed
    assert compute_glass_fill(DAILY, completions, today) == 20 - len(missed)


def test_unscheduled_days_do_not_break_the_run():
    # Monday..Friday from Monday 2025-01-06 to Sunday 2025-01-19, every weekday done
    schedule = Schedule(active_weekdays={1, 2, 3, 4, 5}, created_at=date(2025, 1, 6))
    completions = frozenset(
        to_local_date_key(date(2025, 1, 6) + timedelta(days=i)) for i in range(14) if i % 7 < 5
    )
    assert compute_glass_fill(schedule, completions, date(2025, 1, 19)) == 10


def test_fill_never_goes_negative():
    assert compute_glass_fill(DAILY, frozenset(), date(2025, 3, 1)) == 0


def test_degenerate_inputs():
    empty = Schedule(active_weekdays=set(), created_at=date(2025, 1, 1))
    assert compute_glass_fill(empty, frozenset({"2025-01-02"}), date(2025, 1, 10)) == 0
    assert glass_capacity(empty) == 0
    assert fill_ratio(3, 0) == 0.0
    future = Schedule(created_at=date(2025, 6, 1))
    assert compute_glass_fill(future, frozenset({"2025-01-02"}), date(2025, 1, 10)) == 0


@pytest.mark.parametrize("weekdays,capacity", [(7, 365), (5, 261), (3, 156), (1, 52)])
def test_capacity_follows_schedule(weekdays, capacity):
    schedule = Schedule(active_weekdays=set(range(weekdays)), created_at=date(2025, 1, 1))
    assert glass_capacity(schedule) == capacity


def test_ratio_is_capped():
    assert fill_ratio(400, 365) == 1.0
    assert fill_ratio(73, 365) == pytest.approx(0.2)


def test_report():
    completions = frozenset({"2025-01-01", "2025-01-02", "2025-01-06"})
    report = consistency_report(DAILY, completions, date(2025, 1, 6))
    assert report.fill == 1
    assert report.capacity == 365
    assert report.percent == 0
    assert report.days_filled == 1
    assert report == consistency_report(DAILY, completions, date(2025, 1, 6))
