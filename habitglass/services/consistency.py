from __future__ import annotations

from datetime import date
from typing import AbstractSet

from habitglass.schemas.habit import ConsistencyReport, Schedule
from habitglass.services.schedule import is_eligible_day
from habitglass.utils.dates import iter_dates, to_local_date_key

DAYS_PER_YEAR = 365


def miss_penalty(misses: int) -> int:
    """Total penalty of a run of ``misses`` consecutive missed days: (n-1)^2."""
    if misses <= 0:
        return 0
    return (misses - 1) ** 2


def incremental_penalty(misses: int) -> int:
    """Penalty added by the n-th consecutive miss, i.e. P(n) - P(n-1) = 2n - 3 for n >= 2."""
    return miss_penalty(misses) - miss_penalty(misses - 1)


def compute_glass_fill(schedule: Schedule, completions: AbstractSet[str], today: date) -> float:
    """
    Forward scan from creation to today over eligible days.

    A completed day adds one unit and clears the miss run. A single
    miss is free; every further consecutive miss subtracts the marginal
    penalty. The fill never drops below zero.
    """
    fill = 0.0
    misses = 0
    for day in iter_dates(schedule.created_at, today):
        if not is_eligible_day(schedule, day):
            continue
        if to_local_date_key(day) in completions:
            fill += 1
            misses = 0
            continue
        misses += 1
        if misses >= 2:
            fill = max(0.0, fill - incremental_penalty(misses))
    return fill


def glass_capacity(schedule: Schedule) -> int:
    """Expected number of scheduled days in a year."""
    return round(DAYS_PER_YEAR / 7 * len(schedule.active_weekdays))


def fill_ratio(fill: float, capacity: int) -> float:
    if capacity <= 0:
        return 0.0
    return min(1.0, fill / capacity)


def consistency_report(schedule: Schedule, completions: AbstractSet[str], today: date) -> ConsistencyReport:
    fill = compute_glass_fill(schedule, completions, today)
    capacity = glass_capacity(schedule)
    ratio = fill_ratio(fill, capacity)
    return ConsistencyReport(
        fill=fill,
        capacity=capacity,
        ratio=ratio,
        percent=round(ratio * 100),
        days_filled=round(fill),
    )
