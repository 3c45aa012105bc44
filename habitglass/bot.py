from __future__ import annotations

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties

from habitglass.config import settings
from habitglass.db.session import SessionLocal, create_all
from habitglass.handlers import setup_routers
from habitglass.logging_config import setup_logging
from habitglass.utils.scheduler import AppScheduler


async def main() -> None:
    logger = setup_logging()
    if not settings.BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN is not set. Put it into .env or the environment.")
    logger.info("Starting Habit Glass bot")

    # Ensure tables for local run (prefer Alembic for production)
    await create_all()

    bot = Bot(token=settings.BOT_TOKEN, default=DefaultBotProperties(parse_mode="HTML"))
    dp = Dispatcher()
    dp.include_router(setup_routers())

    scheduler = AppScheduler(bot=bot, session_factory=SessionLocal)
    scheduler.start()

    await dp.start_polling(bot)
