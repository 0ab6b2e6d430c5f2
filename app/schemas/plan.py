"""Plan structure schemas: plan -> weeks -> days -> exercises."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.core.constants import MAX_TARGET_SETS
from app.core.enums import GhostMode
from app.schemas.base import CamelModel


class ExerciseRef(CamelModel):
    """Exercise identity: optional stable id + free-text name."""

    id: str | None = None
    name: str = ""


class PlanExercise(CamelModel):
    id: str
    exercise_id: str | None = None
    exercise_name: str = ""
    target_sets: int = Field(0, ge=0, le=MAX_TARGET_SETS)
    target_reps: str | None = None

    @property
    def ref(self) -> ExerciseRef:
        return ExerciseRef(id=self.exercise_id, name=self.exercise_name)


class PlanDay(CamelModel):
    id: str
    name: str = ""
    items: list[PlanExercise] = []


class PlanWeek(CamelModel):
    id: str
    name: str = ""
    days: list[PlanDay] = []


class PlanBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    weeks: list[PlanWeek] = []
    ghost_mode: GhostMode | None = None
    predecessor_plan_id: int | None = None


class PlanCreate(PlanBase):
    pass


class PlanRead(PlanBase):
    id: int
    archived: bool = False
    created_at: datetime | None = None

    def find_day(self, week_id: str, day_id: str) -> PlanDay | None:
        for week in self.weeks:
            if week.id != week_id:
                continue
            for day in week.days:
                if day.id == day_id:
                    return day
        return None


class PlanPosition(CamelModel):
    """A (week, day) position inside a plan; both None for an empty plan."""

    week_id: str | None = None
    day_id: str | None = None
