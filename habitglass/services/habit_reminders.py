from __future__ import annotations

import logging
from datetime import date
from typing import AbstractSet, Optional

from aiogram import Bot
from sqlalchemy.ext.asyncio import AsyncSession

from habitglass.db.models import Habit, User
from habitglass.schemas.habit import Schedule
from habitglass.services.habit_repository import list_habits, load_completions, schedule_for
from habitglass.services.schedule import is_before_creation, is_eligible_day
from habitglass.utils.dates import add_days, to_local_date_key

logger = logging.getLogger(__name__)


def previous_eligible_day(schedule: Schedule, today: date, lookback: int = 7) -> Optional[date]:
    """Closest eligible day before today within one week, if any."""
    cursor = add_days(today, -1)
    for _ in range(lookback):
        if is_before_creation(schedule, cursor):
            return None
        if is_eligible_day(schedule, cursor):
            return cursor
        cursor = add_days(cursor, -1)
    return None


def is_at_risk(schedule: Schedule, completions: AbstractSet[str], today: date) -> bool:
    """
    Today is scheduled and still open while the previous scheduled day was
    missed: one more miss would start paying the consecutive-miss penalty.
    """
    if not is_eligible_day(schedule, today) or to_local_date_key(today) in completions:
        return False
    previous = previous_eligible_day(schedule, today)
    return previous is not None and to_local_date_key(previous) not in completions


async def habits_at_risk(session: AsyncSession, user: User, today: date) -> list[Habit]:
    at_risk: list[Habit] = []
    for habit in await list_habits(session, user.id):
        completions = await load_completions(session, habit.id, end=today)
        if is_at_risk(schedule_for(habit), completions, today):
            at_risk.append(habit)
    return at_risk


async def send_never_miss_twice_reminder(bot: Bot, session: AsyncSession, user: User, today: date) -> bool:
    """Sends one nudge listing the user's at-risk habits. Returns whether a message went out."""
    habits = await habits_at_risk(session, user, today)
    if not habits:
        return False
    names = "\n".join(f"• {habit.name}" for habit in habits)
    try:
        await bot.send_message(
            user.telegram_id,
            "💧 Never miss twice!\nYesterday's slot was missed for:\n" + names + "\n\nOne check-in today keeps the glass from draining.",
        )
    except Exception:  # pragma: no cover
        logger.exception("Failed to send reminder to user %s", user.id)
        return False
    return True
