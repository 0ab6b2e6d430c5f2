"""Ghost (suggested value) and exercise history schemas."""

from __future__ import annotations

from app.schemas.base import CamelModel


class GhostValue(CamelModel):
    weight: float | None = None
    reps: int | float | None = None

    @property
    def has_value(self) -> bool:
        return self.weight is not None or self.reps is not None


class GhostSet(CamelModel):
    set_index: int
    weight: float | None = None
    reps: int | float | None = None


class ExerciseGhosts(CamelModel):
    """Resolved ghosts for every target set of one plan item."""

    plan_exercise_id: str
    exercise_id: str | None = None
    exercise_name: str
    sets: list[GhostSet] = []


class DayGhosts(CamelModel):
    week_id: str
    day_id: str
    ghost_mode: str
    exercises: list[ExerciseGhosts] = []


class HistoryItem(CamelModel):
    date: str
    weight: float
    reps: int | float


class ExerciseHistory(CamelModel):
    """Every valid logged set of one exercise, newest first, with the PR pulled out."""

    pr: HistoryItem | None = None
    items: list[HistoryItem] = []
