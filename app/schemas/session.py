"""Logged session schemas (one record per plan-day occasion)."""

from __future__ import annotations

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.plan import ExerciseRef


class SessionSet(CamelModel):
    id: str | None = None
    set_index: int | None = Field(None, ge=0)
    weight: float | None = None
    reps: int | float | None = None


class SessionEntry(CamelModel):
    id: str | None = None
    exercise_id: str | None = None
    exercise_name: str = ""
    sets: list[SessionSet] = []
    note: str | None = None

    @property
    def ref(self) -> ExerciseRef:
        return ExerciseRef(id=self.exercise_id, name=self.exercise_name)


class SessionRecord(CamelModel):
    """What was logged for one plan-day on one occasion.

    `date` stays a raw string: history lookups skip records whose date does not parse.
    `ghost_seed` marks a record copied from a predecessor plan; it only feeds suggestions.
    """

    session_id: str
    plan_id: str | None = None
    week_id: str
    day_id: str
    date: str = ""
    entries: list[SessionEntry] = []
    completed: bool = False
    ghost_seed: bool = False


class SessionSave(CamelModel):
    """Body for saving the live session; plan/week/day come from the path."""

    session_id: str | None = None
    date: str | None = None
    entries: list[SessionEntry] = []
    completed: bool = False


class SessionStatus(CamelModel):
    completed: bool
