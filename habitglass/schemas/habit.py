from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ALL_DAYS_MASK = "1111111"  # Mon..Sun


class Schedule(BaseModel):
    """Weekly schedule of a habit: active weekdays (0 = Sunday) and creation date."""

    model_config = ConfigDict(frozen=True)

    active_weekdays: frozenset[int] = frozenset(range(7))
    created_at: date

    @field_validator("active_weekdays")
    @classmethod
    def _check_weekdays(cls, value: frozenset[int]) -> frozenset[int]:
        bad = [day for day in value if not 0 <= day <= 6]
        if bad:
            raise ValueError(f"weekday indices must be in 0..6, got {sorted(bad)}")
        return value

    @field_validator("created_at", mode="before")
    @classmethod
    def _wall_clock_date(cls, value: object) -> object:
        # Timestamps keep their own calendar date, no timezone shift.
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    @classmethod
    def from_mask(cls, mask: Optional[str], created_at: date | datetime | str) -> "Schedule":
        from habitglass.services.schedule import mask_to_weekdays

        return cls(active_weekdays=mask_to_weekdays(mask), created_at=created_at)


class DayRecord(BaseModel):
    """One calendar cell: completion and schedule flags for a single date."""

    model_config = ConfigDict(frozen=True)

    date: str
    completed: bool
    active: bool
    before_creation: bool = False

    @property
    def eligible(self) -> bool:
        return self.active and not self.before_creation


class MonthGrid(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    label: str
    days: list[DayRecord]


class MonthStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    completed: int
    total: int


class MissingLogDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    record: DayRecord
    day: int
    selectable: bool


class MissingLogsMonth(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    label: str
    days: list[MissingLogDay]


class ConsistencyReport(BaseModel):
    """Glass fill of a habit, normalized against a year of scheduled days."""

    model_config = ConfigDict(frozen=True)

    fill: float
    capacity: int
    ratio: float
    percent: int
    days_filled: int


class HabitView(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    streak: int
    completed_today: bool
    history: list[DayRecord]
    consistency: ConsistencyReport


class HabitCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    identity: str = ""
    anchor: str = ""
    description: str = ""
    schedule_mask: str = Field(default=ALL_DAYS_MASK, pattern=r"^[01]{7}$")


class HabitUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    description: Optional[str] = None
    anchor: Optional[str] = None
    schedule_mask: Optional[str] = Field(default=None, pattern=r"^[01]{7}$")
