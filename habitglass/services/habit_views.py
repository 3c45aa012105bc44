from __future__ import annotations

from datetime import date
from typing import Iterable

from habitglass.schemas.habit import HabitView, Schedule
from habitglass.services.consistency import consistency_report
from habitglass.services.history import build_weekly_history
from habitglass.services.streaks import STREAK_SCAN_LIMIT_DAYS, calculate_streak
from habitglass.utils.dates import normalize_completions, to_local_date_key


def build_habit_view(
    name: str,
    schedule: Schedule,
    completions: Iterable[object],
    today: date,
    streak_limit: int = STREAK_SCAN_LIMIT_DAYS,
) -> HabitView:
    """Derived read view of one habit for the given day."""
    snapshot = normalize_completions(completions)
    return HabitView(
        name=name,
        streak=calculate_streak(schedule, snapshot, today, limit=streak_limit),
        completed_today=to_local_date_key(today) in snapshot,
        history=build_weekly_history(schedule, snapshot, today),
        consistency=consistency_report(schedule, snapshot, today),
    )
