from __future__ import annotations

from aiogram import Router, types
from aiogram.filters import Command, CommandStart

router = Router()


HELP_TEXT = (
    "💧 <b>Habit Glass</b>\n"
    "Every scheduled day you complete adds water to the glass. One miss is forgiven, "
    "but each further miss in a row drains it faster.\n\n"
    "/habits - today's habits, streaks and this week\n"
    "/habit_add Name [1111100] - new habit (days Monday..Sunday)\n"
    "/habit_days Name 1111100 - change the schedule\n"
    "/habit_delete Name - remove a habit\n"
    "/glass Name - consistency glass\n"
    "/month Name [YYYY-MM] - month calendar\n"
    "/missed Name - days you can still log\n"
    "/backfill Name YYYY-MM-DD ... - log past days\n"
    "/timezone Europe/Berlin - set your timezone"
)


@router.message(CommandStart())
async def start_handler(message: types.Message) -> None:
    await message.answer(HELP_TEXT)


@router.message(Command("help"))
async def help_handler(message: types.Message) -> None:
    await message.answer(HELP_TEXT)
