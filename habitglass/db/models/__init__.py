from .user import User
from .habit import Habit, HabitCompletion

__all__ = [
    "User",
    "Habit",
    "HabitCompletion",
]
