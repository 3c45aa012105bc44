from __future__ import annotations

import logging
from datetime import date
from html import escape
from typing import Optional

from aiogram import F, Router, types
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandObject

from habitglass.config import settings
from habitglass.db.models import Habit, User
from habitglass.db.session import session_scope
from habitglass.keyboards.common import GLASS_PREFIX, TOGGLE_PREFIX, habits_keyboard, parse_habit_callback
from habitglass.schemas.habit import HabitCreate, HabitUpdate
from habitglass.services.consistency import consistency_report
from habitglass.services.habit_repository import (
    add_retroactive_completions,
    create_habit,
    delete_habit,
    find_habit,
    get_habit,
    get_or_create_user,
    list_habits,
    load_completions,
    schedule_for,
    toggle_completion,
    update_habit,
)
from habitglass.services.habit_views import build_habit_view
from habitglass.services.history import build_month_grid, month_stats
from habitglass.services.retroactive import build_missing_logs_calendar
from habitglass.utils.dates import parse_date_key, to_local_date_key
from habitglass.utils.text_formatter import (
    render_glass,
    render_habit_card,
    render_missing_logs,
    render_month_grid,
    split_long_message,
)
from habitglass.utils.timezone_utils import get_user_local_today, validate_timezone

logger = logging.getLogger(__name__)

router = Router()


def _today_for(user: User) -> date:
    return get_user_local_today(user.timezone or settings.DEFAULT_TIMEZONE)


async def _db_user(session, tg_user: types.User) -> User:
    return await get_or_create_user(
        session,
        telegram_id=tg_user.id,
        username=tg_user.username,
        first_name=tg_user.first_name,
        last_name=tg_user.last_name,
    )


async def _habits_overview(session, user: User) -> tuple[str, types.InlineKeyboardMarkup]:
    today = _today_for(user)
    today_key = to_local_date_key(today)
    habits = await list_habits(session, user.id)
    if not habits:
        return "No habits yet. Add one: /habit_add Name [1111100]", habits_keyboard([], set())
    cards = []
    completed_ids: set[int] = set()
    for habit in habits:
        completions = await load_completions(session, habit.id, end=today)
        view = build_habit_view(
            habit.name,
            schedule_for(habit),
            completions,
            today,
            streak_limit=settings.STREAK_SCAN_LIMIT_DAYS,
        )
        if view.completed_today:
            completed_ids.add(habit.id)
        cards.append(render_habit_card(view, today_key))
    return "\n\n".join(cards), habits_keyboard(habits, completed_ids)


async def _glass_text(session, habit: Habit, today: date) -> str:
    completions = await load_completions(session, habit.id, end=today)
    report = consistency_report(schedule_for(habit), completions, today)
    return f"💧 <b>{escape(habit.name)}</b>\n{render_glass(report)}"


async def edit_overview(message, text: str, keyboard: types.InlineKeyboardMarkup) -> None:
    """Edits the overview message in place; an unchanged overview is left as is."""
    try:
        await message.edit_text(text, reply_markup=keyboard)
    except TelegramBadRequest as exc:
        if "message is not modified" not in str(exc):
            raise
        logger.debug("Overview unchanged, edit skipped")


@router.message(Command("habits"))
async def habits_list(message: types.Message) -> None:
    if not message.from_user:
        return
    async with session_scope() as session:
        user = await _db_user(session, message.from_user)
        text, keyboard = await _habits_overview(session, user)
    await message.answer(text, reply_markup=keyboard)


@router.callback_query(F.data == "habits_refresh")
async def habits_refresh(callback: types.CallbackQuery) -> None:
    async with session_scope() as session:
        user = await _db_user(session, callback.from_user)
        text, keyboard = await _habits_overview(session, user)
    if callback.message:
        await edit_overview(callback.message, text, keyboard)
    await callback.answer()


@router.callback_query(F.data.startswith(TOGGLE_PREFIX))
async def habit_toggle(callback: types.CallbackQuery) -> None:
    habit_id = parse_habit_callback(callback.data or "", TOGGLE_PREFIX)
    if habit_id is None:
        await callback.answer()
        return
    async with session_scope() as session:
        user = await _db_user(session, callback.from_user)
        habit = await get_habit(session, user.id, habit_id)
        if habit is None:
            await callback.answer("Habit not found", show_alert=True)
            return
        done = await toggle_completion(session, habit, _today_for(user))
        text, keyboard = await _habits_overview(session, user)
    if callback.message:
        await edit_overview(callback.message, text, keyboard)
    await callback.answer("Done ✅" if done else "Unchecked")


@router.callback_query(F.data.startswith(GLASS_PREFIX))
async def habit_glass_callback(callback: types.CallbackQuery) -> None:
    habit_id = parse_habit_callback(callback.data or "", GLASS_PREFIX)
    async with session_scope() as session:
        user = await _db_user(session, callback.from_user)
        habit = await get_habit(session, user.id, habit_id) if habit_id is not None else None
        text = await _glass_text(session, habit, _today_for(user)) if habit else "Habit not found"
    if callback.message:
        await callback.message.answer(text)
    await callback.answer()


@router.message(Command("habit_add"))
async def habit_add(message: types.Message, command: CommandObject) -> None:
    """/habit_add Name [1111100] (mask runs Monday..Sunday)."""
    if not message.from_user:
        return
    name, mask = _split_name_and_mask(command.args)
    if not name:
        await message.answer("Usage: /habit_add Name [1111100]")
        return
    try:
        payload = HabitCreate(name=name, schedule_mask=mask) if mask else HabitCreate(name=name)
    except ValueError:
        await message.answer("The schedule mask must be 7 digits of 0/1, Monday first.")
        return
    async with session_scope() as session:
        user = await _db_user(session, message.from_user)
        if await find_habit(session, user.id, payload.name):
            await message.answer("A habit with this name already exists.")
            return
        await create_habit(session, user.id, payload, _today_for(user))
    await message.answer(f"Habit <b>{escape(payload.name)}</b> added ✅")


@router.message(Command("habit_days"))
async def habit_days(message: types.Message, command: CommandObject) -> None:
    """/habit_days Name 1111100"""
    if not message.from_user:
        return
    name, mask = _split_name_and_mask(command.args)
    if not name or not mask:
        await message.answer("Usage: /habit_days Name 1111100")
        return
    try:
        payload = HabitUpdate(schedule_mask=mask)
    except ValueError:
        await message.answer("The schedule mask must be 7 digits of 0/1, Monday first.")
        return
    async with session_scope() as session:
        user = await _db_user(session, message.from_user)
        habit = await find_habit(session, user.id, name)
        if habit is None:
            await message.answer("Habit not found.")
            return
        await update_habit(session, habit, payload)
    await message.answer("Schedule updated ✅")


@router.message(Command("habit_delete"))
async def habit_delete(message: types.Message, command: CommandObject) -> None:
    if not message.from_user:
        return
    name = (command.args or "").strip()
    async with session_scope() as session:
        user = await _db_user(session, message.from_user)
        habit = await find_habit(session, user.id, name) if name else None
        if habit is None:
            await message.answer("Usage: /habit_delete Name")
            return
        await delete_habit(session, habit)
    await message.answer("Habit deleted 🗑")


@router.message(Command("glass"))
async def habit_glass(message: types.Message, command: CommandObject) -> None:
    if not message.from_user:
        return
    async with session_scope() as session:
        user = await _db_user(session, message.from_user)
        habit = await _named_habit(session, user, command.args)
        if habit is None:
            await message.answer("Usage: /glass Name")
            return
        text = await _glass_text(session, habit, _today_for(user))
    await message.answer(text)


@router.message(Command("month"))
async def habit_month(message: types.Message, command: CommandObject) -> None:
    """/month Name [YYYY-MM]"""
    if not message.from_user:
        return
    args = (command.args or "").strip()
    name, period = args, None
    if " " in args and _parse_month(args.rsplit(" ", 1)[1]) is not None:
        name, raw = args.rsplit(" ", 1)
        period = _parse_month(raw)
    async with session_scope() as session:
        user = await _db_user(session, message.from_user)
        habit = await _named_habit(session, user, name)
        if habit is None:
            await message.answer("Usage: /month Name [YYYY-MM]")
            return
        today = _today_for(user)
        year, month = period or (today.year, today.month)
        schedule = schedule_for(habit)
        completions = await load_completions(session, habit.id, end=today)
        grid = build_month_grid(schedule, completions, year, month)
        stats = month_stats(schedule, completions, year, month, today)
    await message.answer(render_month_grid(grid, stats))


@router.message(Command("missed"))
async def habit_missed(message: types.Message, command: CommandObject) -> None:
    if not message.from_user:
        return
    async with session_scope() as session:
        user = await _db_user(session, message.from_user)
        habit = await _named_habit(session, user, command.args)
        if habit is None:
            await message.answer("Usage: /missed Name")
            return
        today = _today_for(user)
        completions = await load_completions(session, habit.id, end=today)
        months = build_missing_logs_calendar(schedule_for(habit), completions, today)
    for part in split_long_message(render_missing_logs(months)):
        await message.answer(part)


@router.message(Command("backfill"))
async def habit_backfill(message: types.Message, command: CommandObject) -> None:
    """/backfill Name YYYY-MM-DD [YYYY-MM-DD ...]"""
    if not message.from_user:
        return
    words = (command.args or "").split()
    dates = [word for word in words if parse_date_key(word) is not None]
    name = " ".join(word for word in words if parse_date_key(word) is None)
    if not name or not dates:
        await message.answer("Usage: /backfill Name YYYY-MM-DD [YYYY-MM-DD ...]")
        return
    async with session_scope() as session:
        user = await _db_user(session, message.from_user)
        habit = await find_habit(session, user.id, name)
        if habit is None:
            await message.answer("Habit not found.")
            return
        added = await add_retroactive_completions(session, habit, dates, _today_for(user))
        logger.info("User %s backfilled %s day(s) for habit %s", user.id, len(added), habit.id)
    skipped = len(dates) - len(added)
    text = f"{len(added)} log{'s' if len(added) != 1 else ''} added ✅"
    if skipped:
        text += f"\n{skipped} skipped: future, unscheduled, before the habit started or already logged."
    await message.answer(text)


@router.message(Command("timezone"))
async def set_timezone(message: types.Message, command: CommandObject) -> None:
    if not message.from_user:
        return
    zone = (command.args or "").strip()
    if not zone or not validate_timezone(zone):
        await message.answer("Usage: /timezone Europe/Berlin (or UTC+3)")
        return
    async with session_scope() as session:
        user = await _db_user(session, message.from_user)
        user.timezone = zone
    await message.answer(f"Timezone set to {zone} ✅")


async def _named_habit(session, user: User, args: Optional[str]) -> Optional[Habit]:
    name = (args or "").strip()
    if not name:
        return None
    return await find_habit(session, user.id, name)


def _split_name_and_mask(args: Optional[str]) -> tuple[str, Optional[str]]:
    payload = (args or "").strip()
    if " " in payload:
        head, tail = payload.rsplit(" ", 1)
        if len(tail) == 7 and set(tail) <= {"0", "1"}:
            return head.strip(), tail
    return payload, None


def _parse_month(raw: str) -> Optional[tuple[int, int]]:
    parsed = parse_date_key(f"{raw}-01")
    if parsed is None:
        return None
    return parsed.year, parsed.month
