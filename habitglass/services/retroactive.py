from __future__ import annotations

from datetime import date
from typing import AbstractSet, Union

from habitglass.schemas.habit import MissingLogDay, MissingLogsMonth, Schedule
from habitglass.services.history import month_label
from habitglass.services.schedule import build_day_record, is_eligible_day
from habitglass.utils.dates import days_in_month, iter_dates, parse_date_key, to_local_date_key


def can_mark_retroactively(
    schedule: Schedule,
    completions: AbstractSet[str],
    day: Union[date, str],
    today: date,
) -> bool:
    """
    Whether a past day may still be added as completed.

    The day must be eligible, not completed yet and not in the future.
    There is no counterpart for removal: backfilled days are permanent.
    """
    parsed = parse_date_key(day)
    if parsed is None:
        return False
    key = to_local_date_key(parsed)
    if key in completions:
        return False
    if key > to_local_date_key(today):
        return False
    return is_eligible_day(schedule, parsed)


def eligible_retroactive_dates(schedule: Schedule, completions: AbstractSet[str], today: date) -> list[str]:
    """Every day from creation to today that can be backfilled, oldest first."""
    return [
        to_local_date_key(day)
        for day in iter_dates(schedule.created_at, today)
        if can_mark_retroactively(schedule, completions, day, today)
    ]


def build_missing_logs_calendar(
    schedule: Schedule,
    completions: AbstractSet[str],
    today: date,
) -> list[MissingLogsMonth]:
    """Month calendars from the creation month through today's month."""
    months: list[MissingLogsMonth] = []
    year, month = schedule.created_at.year, schedule.created_at.month
    while (year, month) <= (today.year, today.month):
        first = date(year, month, 1)
        last = date(year, month, days_in_month(year, month))
        days = [
            MissingLogDay(
                record=build_day_record(schedule, completions, day),
                day=day.day,
                selectable=can_mark_retroactively(schedule, completions, day, today),
            )
            for day in iter_dates(first, last)
        ]
        months.append(MissingLogsMonth(year=year, month=month, label=month_label(year, month), days=days))
        month += 1
        if month > 12:
            month = 1
            year += 1
    return months
