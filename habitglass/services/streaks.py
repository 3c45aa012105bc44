from __future__ import annotations

import logging
from datetime import date
from typing import AbstractSet

from habitglass.schemas.habit import Schedule
from habitglass.services.schedule import is_before_creation, is_eligible_day
from habitglass.utils.dates import add_days, to_local_date_key

logger = logging.getLogger(__name__)

STREAK_SCAN_LIMIT_DAYS = 3650


def calculate_streak(
    schedule: Schedule,
    completions: AbstractSet[str],
    today: date,
    limit: int = STREAK_SCAN_LIMIT_DAYS,
) -> int:
    """
    Consecutive completed eligible days counted backward from today.

    Unscheduled days are skipped without breaking the run. An eligible
    today that is not done yet does not reset the streak: counting
    starts from yesterday instead. The scan gives up after ``limit``
    days and returns whatever it counted so far.
    """
    cursor = today
    if is_eligible_day(schedule, today) and to_local_date_key(today) not in completions:
        cursor = add_days(today, -1)

    streak = 0
    for _ in range(limit):
        if is_before_creation(schedule, cursor):
            break
        if is_eligible_day(schedule, cursor):
            if to_local_date_key(cursor) not in completions:
                break
            streak += 1
        cursor = add_days(cursor, -1)
    else:
        logger.warning("Streak scan hit the %s day bound, returning partial streak %s", limit, streak)
    return streak
