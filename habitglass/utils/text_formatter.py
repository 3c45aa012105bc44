from __future__ import annotations

import re
from html import escape
from typing import List, Sequence

from habitglass.schemas.habit import (
    ConsistencyReport, DayRecord, HabitView, MissingLogsMonth, MonthGrid, MonthStats,
)
from habitglass.utils.dates import parse_date_key, weekday_of

WEEK_HEADER = "Mo Tu We Th Fr Sa Su"
GLASS_WIDTH = 10


def day_symbol(record: DayRecord) -> str:
    """Single cell of a calendar row."""
    if record.completed:
        return "🟩"
    if record.before_creation:
        return "▫️"
    if not record.active:
        return "⬜"
    return "🟥"


def render_week_row(history: Sequence[DayRecord], today_key: str) -> str:
    # Today and the rest of the week are still open, not missed
    cells = []
    for record in history:
        if record.date >= today_key and not record.completed:
            cells.append("⬜" if not record.eligible else "🔲")
        else:
            cells.append(day_symbol(record))
    return "".join(cells)


def render_glass(report: ConsistencyReport) -> str:
    filled = round(report.ratio * GLASS_WIDTH)
    bar = "🟦" * filled + "⬜" * (GLASS_WIDTH - filled)
    return f"{bar} {report.percent}%\n{report.days_filled} days filled of {report.capacity}"


def render_habit_card(view: HabitView, today_key: str) -> str:
    status = "✅" if view.completed_today else "⭕"
    return (
        f"{status} <b>{escape(view.name)}</b>\n"
        f"🔥 Streak: {view.streak}\n"
        f"{render_week_row(view.history, today_key)}\n"
        f"💧 Glass: {view.consistency.percent}%"
    )


def render_month_grid(grid: MonthGrid, stats: MonthStats) -> str:
    """Month calendar aligned to Monday, with the completion tally underneath."""
    lines = [f"<b>{grid.label}</b>", WEEK_HEADER]
    # Monday-first column of the first day; weekday indices have 0 = Sunday
    first_weekday = (_weekday_index(grid.days[0].date) + 6) % 7 if grid.days else 0
    row = ["  "] * first_weekday
    for record in grid.days:
        row.append(day_symbol(record))
        if len(row) == 7:
            lines.append("".join(row))
            row = []
    if row:
        lines.append("".join(row))
    lines.append(f"Completed {stats.completed}/{stats.total}")
    return "\n".join(lines)


def render_missing_logs(months: Sequence[MissingLogsMonth], limit: int = 31) -> str:
    """Lists the most recent days that can still be backfilled."""
    selectable = [day.record.date for month in months for day in month.days if day.selectable]
    if not selectable:
        return "Nothing to backfill 🎉"
    recent = selectable[-limit:]
    text = "Days you can still log:\n" + "\n".join(f"• {key}" for key in reversed(recent))
    if len(selectable) > limit:
        text += f"\n…and {len(selectable) - limit} earlier days"
    return text


def _weekday_index(key: str) -> int:
    parsed = parse_date_key(key)
    return weekday_of(parsed) if parsed else 0


def split_long_message(text: str, max_length: int = 4096) -> List[str]:
    """
    Splits a message into parts that fit into one Telegram message.

    Breaks on line boundaries first, then on words, and cuts words
    that are still too long.
    """
    if len(text) <= max_length:
        return [text]

    parts: List[str] = []
    current_part = ""
    for line in text.split("\n"):
        if len(current_part) + len(line) + 1 <= max_length:
            current_part = f"{current_part}\n{line}" if current_part else line
            continue
        if current_part:
            parts.append(current_part)
            current_part = ""
        for word in re.split(r"(\s+)", line):
            if len(current_part) + len(word) <= max_length:
                current_part += word
                continue
            if current_part:
                parts.append(current_part)
            while len(word) > max_length:
                parts.append(word[:max_length])
                word = word[max_length:]
            current_part = word
    if current_part:
        parts.append(current_part)
    return parts
