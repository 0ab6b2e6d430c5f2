"""Streak configuration, persisted state and evaluation result."""

from __future__ import annotations

from datetime import date

from pydantic import Field, field_validator

from app.core.enums import StreakScheduleMode
from app.schemas.base import CamelModel


class StreakConfig(CamelModel):
    enabled: bool = False
    schedule_mode: StreakScheduleMode = StreakScheduleMode.DAILY
    rolling_days_on: int | None = Field(None, ge=0)
    rolling_days_off: int | None = Field(None, ge=0)
    weekly_days: set[int] | None = None  # 0=Sunday .. 6=Saturday
    start_date: date
    timezone: str = "UTC"

    @field_validator("weekly_days")
    @classmethod
    def _weekday_range(cls, v: set[int] | None) -> set[int] | None:
        if v is None:
            return v
        bad = [d for d in v if d < 0 or d > 6]
        if bad:
            raise ValueError(f"weekly_days must be in 0..6 (0=Sunday), got {sorted(bad)}")
        return v


class StreakState(CamelModel):
    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)
    last_workout_date: date | None = None


class StreakEvaluation(CamelModel):
    current_streak: int = 0
    is_hit_today: bool = False
    streak_broken: bool = False


class StreakRead(CamelModel):
    """GET /streak: evaluation plus the stored config/state it was computed from."""

    config: StreakConfig | None = None
    state: StreakState | None = None
    evaluation: StreakEvaluation
