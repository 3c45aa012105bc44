from __future__ import annotations

from typing import Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from habitglass.db.models import Habit

TOGGLE_PREFIX = "habit_toggle:"
GLASS_PREFIX = "habit_glass:"


def habits_keyboard(habits: Sequence[Habit], completed_ids: set[int]) -> InlineKeyboardMarkup:
    """One row per habit: today's toggle and the glass view."""
    rows = []
    for habit in habits:
        mark = "✅" if habit.id in completed_ids else "⭕"
        rows.append(
            [
                InlineKeyboardButton(text=f"{mark} {habit.name}", callback_data=f"{TOGGLE_PREFIX}{habit.id}"),
                InlineKeyboardButton(text="💧", callback_data=f"{GLASS_PREFIX}{habit.id}"),
            ]
        )
    rows.append([InlineKeyboardButton(text="🔄 Refresh", callback_data="habits_refresh")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def parse_habit_callback(data: str, prefix: str) -> int | None:
    if not data.startswith(prefix):
        return None
    try:
        return int(data[len(prefix):])
    except ValueError:
        return None
