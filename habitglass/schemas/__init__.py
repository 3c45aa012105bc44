from .habit import (
    ConsistencyReport, DayRecord, HabitCreate, HabitUpdate, HabitView,
    MissingLogDay, MissingLogsMonth, MonthGrid, MonthStats, Schedule,
)

__all__ = [
    "ConsistencyReport",
    "DayRecord",
    "HabitCreate",
    "HabitUpdate",
    "HabitView",
    "MissingLogDay",
    "MissingLogsMonth",
    "MonthGrid",
    "MonthStats",
    "Schedule",
]
