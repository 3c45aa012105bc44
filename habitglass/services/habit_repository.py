from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from habitglass.db.models import Habit, HabitCompletion, User
from habitglass.schemas.habit import HabitCreate, HabitUpdate, Schedule
from habitglass.services.retroactive import can_mark_retroactively
from habitglass.utils.dates import normalize_completions, parse_date_key, to_local_date_key

logger = logging.getLogger(__name__)


async def get_or_create_user(
    session: AsyncSession,
    telegram_id: int,
    username: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> User:
    user = (await session.execute(select(User).where(User.telegram_id == telegram_id))).scalar_one_or_none()
    if user is None:
        user = User(telegram_id=telegram_id, username=username, first_name=first_name, last_name=last_name)
        session.add(user)
        await session.flush()
    return user


async def list_users(session: AsyncSession) -> list[User]:
    result = await session.execute(select(User))
    return list(result.scalars().all())


def schedule_for(habit: Habit) -> Schedule:
    return Schedule.from_mask(habit.schedule_mask, habit.created_on)


async def create_habit(session: AsyncSession, user_id: int, data: HabitCreate, today: date) -> Habit:
    """Adds a habit at the end of the user's list, starting on the user's local today."""
    max_order = (
        await session.execute(select(func.max(Habit.sort_order)).where(Habit.user_id == user_id))
    ).scalar_one_or_none()
    habit = Habit(
        user_id=user_id,
        name=data.name,
        identity=data.identity,
        anchor=data.anchor,
        description=data.description,
        schedule_mask=data.schedule_mask,
        sort_order=(max_order or 0) + 1,
        created_on=to_local_date_key(today),
    )
    session.add(habit)
    await session.flush()
    logger.info("Created habit %s for user %s", habit.id, user_id)
    return habit


async def list_habits(session: AsyncSession, user_id: int) -> list[Habit]:
    result = await session.execute(
        select(Habit)
        .where(Habit.user_id == user_id, Habit.archived.is_(False))
        .order_by(Habit.sort_order, Habit.created_at, Habit.id)
    )
    return list(result.scalars().all())


async def find_habit(session: AsyncSession, user_id: int, name: str) -> Optional[Habit]:
    result = await session.execute(
        select(Habit).where(
            Habit.user_id == user_id,
            Habit.archived.is_(False),
            func.lower(Habit.name) == name.strip().lower(),
        )
    )
    return result.scalars().first()


async def get_habit(session: AsyncSession, user_id: int, habit_id: int) -> Optional[Habit]:
    result = await session.execute(select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id))
    return result.scalar_one_or_none()


async def update_habit(session: AsyncSession, habit: Habit, data: HabitUpdate) -> Habit:
    for field, value in data.model_dump(exclude_none=True).items():
        setattr(habit, field, value)
    await session.flush()
    return habit


async def archive_habit(session: AsyncSession, habit: Habit) -> None:
    habit.archived = True
    await session.flush()


async def delete_habit(session: AsyncSession, habit: Habit) -> None:
    """Removes the habit together with its completion records."""
    await session.execute(delete(HabitCompletion).where(HabitCompletion.habit_id == habit.id))
    await session.delete(habit)
    await session.flush()
    logger.info("Deleted habit %s", habit.id)


async def reorder_habits(session: AsyncSession, user_id: int, ordered_ids: Sequence[int]) -> None:
    habits = {habit.id: habit for habit in await list_habits(session, user_id)}
    for position, habit_id in enumerate(ordered_ids):
        habit = habits.get(habit_id)
        if habit is not None:
            habit.sort_order = position
    await session.flush()


async def load_completions(
    session: AsyncSession,
    habit_id: int,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> frozenset[str]:
    """Completion snapshot of one habit, optionally limited to an inclusive date range."""
    query = select(HabitCompletion.completed_date).where(HabitCompletion.habit_id == habit_id)
    if start is not None:
        query = query.where(HabitCompletion.completed_date >= to_local_date_key(start))
    if end is not None:
        query = query.where(HabitCompletion.completed_date <= to_local_date_key(end))
    result = await session.execute(query)
    return normalize_completions(result.scalars().all())


async def toggle_completion(session: AsyncSession, habit: Habit, today: date) -> bool:
    """Flips today's completion and returns the new state."""
    key = to_local_date_key(today)
    existing = (
        await session.execute(
            select(HabitCompletion).where(
                HabitCompletion.habit_id == habit.id,
                HabitCompletion.completed_date == key,
            )
        )
    ).scalar_one_or_none()
    if existing is not None:
        await session.delete(existing)
        await session.flush()
        return False
    session.add(HabitCompletion(habit_id=habit.id, user_id=habit.user_id, completed_date=key))
    await session.flush()
    return True


async def add_retroactive_completions(
    session: AsyncSession,
    habit: Habit,
    days: Iterable[object],
    today: date,
) -> list[str]:
    """
    Inserts backfilled completions that pass the retroactive check.

    Returns the keys actually added, oldest first. Rejected days
    (future, before creation, unscheduled, already done or unparsable)
    are skipped.
    """
    schedule = schedule_for(habit)
    completions = set(await load_completions(session, habit.id))
    added: list[str] = []
    for day in days:
        if not can_mark_retroactively(schedule, completions, day, today):
            logger.info("Rejected retroactive completion %r for habit %s", day, habit.id)
            continue
        key = to_local_date_key(parse_date_key(day))
        completions.add(key)
        added.append(key)
    for key in sorted(added):
        session.add(HabitCompletion(habit_id=habit.id, user_id=habit.user_id, completed_date=key))
    await session.flush()
    return sorted(added)
