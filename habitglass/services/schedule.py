from __future__ import annotations

from datetime import date
from typing import AbstractSet, Iterable, Optional, Union

from habitglass.schemas.habit import DayRecord, Schedule
from habitglass.utils.dates import parse_date_key, to_local_date_key, weekday_of

# Stored masks run Monday..Sunday; weekday indices use 0 = Sunday.
_MASK_TO_WEEKDAY = (1, 2, 3, 4, 5, 6, 0)


def mask_to_weekdays(mask: Optional[str]) -> frozenset[int]:
    """'1111100' -> {1, 2, 3, 4, 5}. A missing mask means every day."""
    if mask is None:
        return frozenset(range(7))
    return frozenset(
        _MASK_TO_WEEKDAY[position]
        for position, flag in enumerate(mask[:7])
        if flag == "1"
    )


def weekdays_to_mask(weekdays: Iterable[int]) -> str:
    active = set(weekdays)
    return "".join("1" if weekday in active else "0" for weekday in _MASK_TO_WEEKDAY)


def is_active_weekday(schedule: Schedule, day: Union[date, str]) -> bool:
    parsed = parse_date_key(day)
    if parsed is None:
        return False
    return weekday_of(parsed) in schedule.active_weekdays


def is_before_creation(schedule: Schedule, day: Union[date, str]) -> bool:
    parsed = parse_date_key(day)
    if parsed is None:
        return False
    return to_local_date_key(parsed) < to_local_date_key(schedule.created_at)


def is_eligible_day(schedule: Schedule, day: Union[date, str]) -> bool:
    """True when the weekday is scheduled and the date is not before creation."""
    parsed = parse_date_key(day)
    if parsed is None:
        return False
    return is_active_weekday(schedule, parsed) and not is_before_creation(schedule, parsed)


def build_day_record(schedule: Schedule, completions: AbstractSet[str], day: date) -> DayRecord:
    """Calendar cell shared by the weekly history, month/year grids and missing logs."""
    key = to_local_date_key(day)
    return DayRecord(
        date=key,
        completed=key in completions,
        active=is_active_weekday(schedule, day),
        before_creation=is_before_creation(schedule, day),
    )
