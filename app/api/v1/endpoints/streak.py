"""Streak endpoints: evaluate the stored streak and configure the schedule."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_now
from app.core.config import get_settings
from app.db.session import get_db
from app.schemas.streak import StreakConfig, StreakRead, StreakState
from app.services.streak import evaluate_streak, reconcile_streak
from app.services.stores import load_prefs, save_prefs

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=StreakRead)
async def get_streak(
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Current streak as of now. A streak broken by a missed scheduled day is reported with
    streak_broken=true and is reset to 0 in the stored state (longest streak is kept).
    """
    prefs = await load_prefs(db)
    evaluation = evaluate_streak(prefs.streak_config, prefs.streak_state, now)
    state = reconcile_streak(prefs.streak_config, prefs.streak_state, now)
    if state != prefs.streak_state:
        await save_prefs(db, {"streak_state": state})
    return StreakRead(config=prefs.streak_config, state=state, evaluation=evaluation)


@router.put("/config", response_model=StreakRead)
async def put_streak_config(
    payload: StreakConfig,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Save the schedule. Turning the streak on (from off or unset) starts it at zero."""
    if "timezone" not in payload.model_fields_set:
        payload = payload.model_copy(update={"timezone": get_settings().default_timezone})

    prefs = await load_prefs(db)
    was_enabled = prefs.streak_config is not None and prefs.streak_config.enabled
    partial: dict = {"streak_config": payload}
    state = prefs.streak_state
    if payload.enabled and (not was_enabled or state is None):
        state = StreakState(current_streak=0, longest_streak=0, last_workout_date=None)
        partial["streak_state"] = state
        logger.info("Streak enabled (%s), state reset", payload.schedule_mode.value)

    prefs = await save_prefs(db, partial)
    return StreakRead(
        config=prefs.streak_config,
        state=prefs.streak_state,
        evaluation=evaluate_streak(prefs.streak_config, prefs.streak_state, now),
    )
