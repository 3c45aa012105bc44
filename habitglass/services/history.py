from __future__ import annotations

from datetime import date
from typing import AbstractSet

from habitglass.schemas.habit import DayRecord, MonthGrid, MonthStats, Schedule
from habitglass.services.schedule import build_day_record, is_eligible_day
from habitglass.utils.dates import add_days, days_in_month, iter_dates, week_start

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def build_weekly_history(schedule: Schedule, completions: AbstractSet[str], today: date) -> list[DayRecord]:
    """Seven day records, Monday..Sunday of the week containing today."""
    monday = week_start(today)
    return [build_day_record(schedule, completions, add_days(monday, offset)) for offset in range(7)]


def month_label(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {year}"


def build_month_grid(schedule: Schedule, completions: AbstractSet[str], year: int, month: int) -> MonthGrid:
    first = date(year, month, 1)
    last = date(year, month, days_in_month(year, month))
    return MonthGrid(
        year=year,
        month=month,
        label=month_label(year, month),
        days=[build_day_record(schedule, completions, day) for day in iter_dates(first, last)],
    )


def build_year_grid(schedule: Schedule, completions: AbstractSet[str], year: int) -> list[MonthGrid]:
    return [build_month_grid(schedule, completions, year, month) for month in range(1, 13)]


def month_stats(
    schedule: Schedule,
    completions: AbstractSet[str],
    year: int,
    month: int,
    today: date,
) -> MonthStats:
    """
    Completed vs. scheduled days for one month.

    Only eligible days count, and the total stops at today so that
    days still ahead in the current month are not counted as owed.
    """
    first = date(year, month, 1)
    last = min(date(year, month, days_in_month(year, month)), today)
    completed = 0
    total = 0
    for day in iter_dates(first, last):
        if not is_eligible_day(schedule, day):
            continue
        total += 1
        if build_day_record(schedule, completions, day).completed:
            completed += 1
    return MonthStats(completed=completed, total=total)


def available_years(schedule: Schedule, today: date) -> list[int]:
    """Years from today's back to the creation year, newest first. Empty before creation."""
    if schedule.created_at > today:
        return []
    return list(range(today.year, schedule.created_at.year - 1, -1))
