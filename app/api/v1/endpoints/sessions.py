"""Live session endpoints: load/save a plan day's session, ghosts, notes, completion."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_now
from app.core.config import get_settings
from app.core.enums import GhostMode
from app.db.session import get_db
from app.schemas.ghost import DayGhosts
from app.schemas.plan import PlanDay, PlanRead
from app.schemas.session import SessionRecord, SessionSave, SessionStatus
from app.schemas.streak import StreakRead
from app.services.ghost import build_same_day_ghost, resolve_day_ghosts
from app.services.history_index import ScopeFilter, build_index, full_body_scope
from app.services.session_merge import (
    merge_session_with_day,
    seed_notes,
    session_shape_changed,
    start_session_from_day,
)
from app.services.streak import evaluate_streak, reconcile_streak, record_workout_completion
from app.services.stores import (
    get_plan,
    is_completed,
    last_session_for_day,
    list_all_sessions,
    load_prefs,
    mark_completed,
    save_prefs,
    save_session,
    sessions_by_day,
)

logger = logging.getLogger(__name__)
router = APIRouter()


async def _load_day(db: AsyncSession, plan_id: int, week_id: str, day_id: str) -> tuple[PlanRead, PlanDay]:
    plan = await get_plan(db, plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    day = plan.find_day(week_id, day_id)
    if not day:
        raise HTTPException(status_code=404, detail="Plan day not found")
    return plan, day


def _ghost_mode(plan: PlanRead) -> GhostMode:
    if plan.ghost_mode is not None:
        return plan.ghost_mode
    try:
        return GhostMode(get_settings().default_ghost_mode)
    except ValueError:
        return GhostMode.DEFAULT


def _lineage_scope(plan: PlanRead, day_id: str, mode: GhostMode) -> ScopeFilter | None:
    return full_body_scope(plan, day_id) if mode == GhostMode.FULL_BODY else None


def _history_scope(plan: PlanRead, week_id: str, day_id: str, mode: GhostMode) -> ScopeFilter:
    """Everything except the session being logged; full-body mode also requires a same-named day."""
    plan_key = str(plan.id)
    day_scope = _lineage_scope(plan, day_id, mode)

    def scope(record: SessionRecord) -> bool:
        if record.plan_id == plan_key and record.week_id == week_id and record.day_id == day_id:
            return False
        return day_scope is None or day_scope(record)

    return scope


@router.get("/{plan_id}/{week_id}/{day_id}", response_model=SessionRecord)
async def get_session(
    plan_id: int,
    week_id: str,
    day_id: str,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Latest session for the day, re-shaped to the current plan day with notes carried over from
    the previous occurrence. Ghost-seed sessions are replaced by a fresh session.
    """
    plan, day = await _load_day(db, plan_id, week_id, day_id)
    latest = await last_session_for_day(db, plan_id, week_id, day_id)

    stored = latest is not None and not latest.ghost_seed
    if stored:
        session = merge_session_with_day(day, latest)
    else:
        session = start_session_from_day(plan, week_id, day, now)

    _, notes = build_same_day_ghost(
        plan, week_id, day_id, await sessions_by_day(db, plan_id), _lineage_scope(plan, day_id, _ghost_mode(plan))
    )
    seeded = seed_notes(session, notes)
    # Fresh sessions are written on the first PUT
    if stored and (session_shape_changed(latest, session) or seeded is not session):
        await save_session(db, plan_id, seeded)
    if not seeded.completed and await is_completed(db, plan_id, week_id, day_id):
        seeded = seeded.model_copy(update={"completed": True})
    return seeded


@router.put("/{plan_id}/{week_id}/{day_id}", response_model=SessionRecord)
async def put_session(
    plan_id: int,
    week_id: str,
    day_id: str,
    payload: SessionSave,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Save the live session, aligned to the plan day (plan order, target set counts)."""
    plan, day = await _load_day(db, plan_id, week_id, day_id)
    record = SessionRecord(
        session_id=payload.session_id or str(uuid.uuid4()),
        plan_id=str(plan.id),
        week_id=week_id,
        day_id=day_id,
        date=payload.date or now.isoformat(),
        entries=payload.entries,
        completed=payload.completed,
    )
    merged = merge_session_with_day(day, record)
    return await save_session(db, plan_id, merged)


@router.get("/{plan_id}/{week_id}/{day_id}/ghosts", response_model=DayGhosts)
async def get_ghosts(
    plan_id: int,
    week_id: str,
    day_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Suggested weight/reps for every target set of every exercise on the day."""
    plan, day = await _load_day(db, plan_id, week_id, day_id)
    mode = _ghost_mode(plan)

    same_day, _ = build_same_day_ghost(
        plan, week_id, day_id, await sessions_by_day(db, plan_id), _lineage_scope(plan, day_id, mode)
    )
    records = await list_all_sessions(db)
    index = build_index(records, [item.ref for item in day.items], _history_scope(plan, week_id, day_id, mode))

    return DayGhosts(
        week_id=week_id,
        day_id=day_id,
        ghost_mode=mode.value,
        exercises=resolve_day_ghosts(day, same_day, index),
    )


@router.get("/{plan_id}/{week_id}/{day_id}/previous-notes", response_model=dict[str, str | None])
async def get_previous_notes(
    plan_id: int,
    week_id: str,
    day_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Notes from the previous occurrence of each exercise, keyed by exercise match key."""
    plan, _ = await _load_day(db, plan_id, week_id, day_id)
    _, notes = build_same_day_ghost(
        plan, week_id, day_id, await sessions_by_day(db, plan_id), _lineage_scope(plan, day_id, _ghost_mode(plan))
    )
    return notes


@router.get("/{plan_id}/{week_id}/{day_id}/status", response_model=SessionStatus)
async def get_status(
    plan_id: int,
    week_id: str,
    day_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Whether the plan day has been marked done."""
    await _load_day(db, plan_id, week_id, day_id)
    return SessionStatus(completed=await is_completed(db, plan_id, week_id, day_id))


@router.post("/{plan_id}/{week_id}/{day_id}/complete", response_model=StreakRead)
async def complete_session(
    plan_id: int,
    week_id: str,
    day_id: str,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Mark the day done and count the workout toward the streak."""
    plan, day = await _load_day(db, plan_id, week_id, day_id)
    await mark_completed(db, plan_id, week_id, day_id)

    latest = await last_session_for_day(db, plan_id, week_id, day_id)
    if latest is not None and not latest.ghost_seed:
        await save_session(db, plan_id, latest.model_copy(update={"completed": True}))
    else:
        fresh = start_session_from_day(plan, week_id, day, now)
        await save_session(db, plan_id, fresh.model_copy(update={"completed": True}))

    prefs = await load_prefs(db)
    config = prefs.streak_config
    state = reconcile_streak(config, prefs.streak_state, now)
    new_state = record_workout_completion(config, state, now)
    if new_state != prefs.streak_state:
        await save_prefs(db, {"streak_state": new_state})
        logger.info(
            "Streak updated: %s -> %s",
            prefs.streak_state.current_streak if prefs.streak_state else None,
            new_state.current_streak if new_state else None,
            extra={"lift_plan_id": plan_id, "lift_week_id": week_id, "lift_day_id": day_id},
        )

    return StreakRead(
        config=config,
        state=new_state,
        evaluation=evaluate_streak(config, new_state, now),
    )
