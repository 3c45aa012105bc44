from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytz

logger = logging.getLogger(__name__)


def parse_utc_offset(timezone_str: str) -> Optional[float]:
    """
    Parses UTC+3, UTC-5, UTC+5:30 style offsets.

    Returns:
        Offset in hours (fractional for half-hour zones) or None
    """
    match = re.match(r"^UTC([+-])(\d{1,2})(?::(\d{2}))?$", timezone_str)
    if not match:
        return None
    hours = int(match.group(2))
    minutes = int(match.group(3)) if match.group(3) else 0
    if hours > 14 or minutes >= 60:
        return None
    total_hours = hours + minutes / 60
    return -total_hours if match.group(1) == "-" else total_hours


def get_user_local_time(user_timezone: Optional[str], now: Optional[datetime] = None) -> datetime:
    """
    Current wall-clock time of the user.
    Falls back to UTC when the timezone is missing or unknown.
    """
    utc_now = now or datetime.now(timezone.utc)
    if not user_timezone:
        return utc_now

    if user_timezone.startswith("UTC"):
        offset = parse_utc_offset(user_timezone)
        if offset is not None:
            return utc_now.astimezone(timezone(timedelta(hours=offset)))

    try:
        return utc_now.astimezone(pytz.timezone(user_timezone))
    except pytz.exceptions.UnknownTimeZoneError:
        logger.warning("Unknown timezone %r, using UTC", user_timezone)
        return utc_now


def get_user_local_today(user_timezone: Optional[str], now: Optional[datetime] = None) -> date:
    """The user's local calendar date, passed as "today" into the habit engine."""
    return get_user_local_time(user_timezone, now).date()


def is_time_to_send_reminder(
    user_timezone: Optional[str],
    target_hour: int,
    window_minutes: int = 1,
    now: Optional[datetime] = None,
) -> bool:
    """Whether the user's local time is inside the first minutes of target_hour."""
    user_local_time = get_user_local_time(user_timezone, now)
    if user_local_time.hour == target_hour:
        return 0 <= user_local_time.minute < window_minutes
    return False


def validate_timezone(timezone_str: str) -> bool:
    """Accepts IANA names (Europe/Berlin) and UTC+3 style offsets."""
    if timezone_str.startswith("UTC") and timezone_str != "UTC":
        return parse_utc_offset(timezone_str) is not None
    try:
        pytz.timezone(timezone_str)
        return True
    except pytz.exceptions.UnknownTimeZoneError:
        return False
