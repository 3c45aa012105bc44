from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict

from aiogram import Bot
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from habitglass.config import settings
from habitglass.services.habit_reminders import send_never_miss_twice_reminder
from habitglass.services.habit_repository import list_users
from habitglass.utils.timezone_utils import get_user_local_today, is_time_to_send_reminder

logger = logging.getLogger(__name__)


class AppScheduler:
    """Wrapper around APScheduler running per-user reminders in the user's timezone."""

    def __init__(self, bot: Bot, session_factory: Callable[[], AsyncSession]):
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.bot = bot
        self.session_factory = session_factory
        # {"<user_id>_<reminder_type>": local date of the last send}
        self.sent_reminders: Dict[str, date] = {}

    def _get_reminder_key(self, user_id: int, reminder_type: str) -> str:
        return f"{user_id}_{reminder_type}"

    def _is_reminder_sent_today(self, user_id: int, reminder_type: str, today: date) -> bool:
        return self.sent_reminders.get(self._get_reminder_key(user_id, reminder_type)) == today

    def _mark_reminder_sent(self, user_id: int, reminder_type: str, today: date) -> None:
        self.sent_reminders[self._get_reminder_key(user_id, reminder_type)] = today

    def start(self) -> None:
        # Every minute, so that each user's local reminder hour is caught
        self.scheduler.add_job(self._never_miss_twice_job, IntervalTrigger(minutes=1))
        self.scheduler.start()
        logger.info("AppScheduler started")

    async def _never_miss_twice_job(self) -> None:
        """Nudges users whose habits would otherwise be missed twice in a row."""
        async with self.session_factory() as session:  # type: ignore[misc]
            users = await list_users(session)
            for user in users:
                user_timezone = user.timezone or settings.DEFAULT_TIMEZONE
                today = get_user_local_today(user_timezone)
                if self._is_reminder_sent_today(user.id, "never_miss_twice", today):
                    continue
                if not is_time_to_send_reminder(user_timezone, settings.REMINDER_HOUR):
                    continue
                try:
                    await send_never_miss_twice_reminder(self.bot, session, user, today)
                except Exception:
                    logger.exception("Reminder job failed for user %s", user.id)
                    continue
                self._mark_reminder_sent(user.id, "never_miss_twice", today)
