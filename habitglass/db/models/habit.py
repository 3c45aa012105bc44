from __future__ import annotations

from datetime import datetime

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..base import Base
from .user import _utcnow


class Habit(Base):
    """Habit definition with its weekly schedule."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(128), index=True)
    identity: Mapped[str] = mapped_column(String(256), default="")
    anchor: Mapped[str] = mapped_column(String(256), default="")
    description: Mapped[str] = mapped_column(String(1024), default="")
    schedule_mask: Mapped[str] = mapped_column(String(7), default="1111111")  # Mon..Sun
    sort_order: Mapped[int] = mapped_column(default=0)
    archived: Mapped[bool] = mapped_column(default=False)
    # YYYY-MM-DD in the owner's timezone; the first day the habit can count
    created_on: Mapped[str] = mapped_column(String(10))
    created_at: Mapped[datetime] = mapped_column(default=_utcnow)


class HabitCompletion(Base):
    """One completed day of a habit, keyed by its YYYY-MM-DD local date."""

    __table_args__ = (UniqueConstraint("habit_id", "completed_date", name="uq_habit_completion_day"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    habit_id: Mapped[int] = mapped_column(ForeignKey("habit.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), index=True)
    completed_date: Mapped[str] = mapped_column(String(10), index=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow)
