"""Exercise history across all sessions, with the personal record pulled out."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.ghost import ExerciseHistory
from app.schemas.plan import ExerciseRef
from app.services.history_index import exercise_history
from app.services.stores import list_all_sessions

router = APIRouter()


@router.get("/history", response_model=ExerciseHistory)
async def get_exercise_history(
    name: str | None = None,
    exercise_id: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Every logged set (weight and reps both present) for the exercise, newest first.
    Matches by id when both sides have one, otherwise by name (case/whitespace-insensitive).
    """
    if not (name and name.strip()) and not exercise_id:
        raise HTTPException(status_code=400, detail="Pass name or exercise_id.")
    records = await list_all_sessions(db)
    return exercise_history(records, ExerciseRef(id=exercise_id, name=name or ""))
