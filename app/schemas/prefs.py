"""User preference document (navigation state + streak data)."""

from __future__ import annotations

from app.schemas.base import CamelModel
from app.schemas.streak import StreakConfig, StreakState


class UserPrefsData(CamelModel):
    last_plan_id: int | None = None
    last_week_id: str | None = None
    last_day_id: str | None = None
    streak_config: StreakConfig | None = None
    streak_state: StreakState | None = None


class UserPrefsUpdate(CamelModel):
    """Partial update; only keys actually sent are merged into the stored document."""

    last_plan_id: int | None = None
    last_week_id: str | None = None
    last_day_id: str | None = None
