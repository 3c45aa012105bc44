from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Optional, Union

logger = logging.getLogger(__name__)

DATE_KEY_FORMAT = "%Y-%m-%d"


def to_local_date_key(value: Union[date, datetime]) -> str:
    """Canonical YYYY-MM-DD key built from the wall-clock year/month/day."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_date_key(value: object) -> Optional[date]:
    """
    Converts a date, datetime or YYYY-MM-DD key into a date.

    Returns None for anything that cannot be read as a calendar date,
    so callers can treat it as matching nothing.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value) != 10:
        return None
    try:
        return datetime.strptime(value, DATE_KEY_FORMAT).date()
    except ValueError:
        return None


def weekday_of(value: Union[date, datetime]) -> int:
    """Day of week with 0 = Sunday .. 6 = Saturday."""
    return (value.weekday() + 1) % 7


def add_days(value: Union[date, datetime], days: int) -> date:
    if isinstance(value, datetime):
        value = value.date()
    return value + timedelta(days=days)


def is_after(key: str, other: str) -> bool:
    return key > other


def is_before_or_equal(key: str, other: str) -> bool:
    return key <= other


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yields every date from start to end inclusive. Empty when start > end."""
    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def week_start(today: date) -> date:
    """Monday of the week containing today (weeks run Monday..Sunday)."""
    day = weekday_of(today)
    offset = -6 if day == 0 else 1 - day
    return add_days(today, offset)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def normalize_completions(values: Iterable[object]) -> frozenset[str]:
    """
    Builds an immutable completion snapshot of canonical date keys.

    Duplicates collapse; entries that are not valid dates are dropped.
    """
    keys = set()
    for value in values or ():
        parsed = parse_date_key(value)
        if parsed is None:
            logger.debug("Ignoring unparsable completion date: %r", value)
            continue
        keys.add(to_local_date_key(parsed))
    return frozenset(keys)
