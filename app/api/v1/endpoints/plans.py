"""Plan endpoints - minimal create/read, day navigation and ghost seeding from a predecessor."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_now
from app.db.session import get_db
from app.schemas.plan import PlanCreate, PlanPosition, PlanRead
from app.services.ghost import seed_ghost_sessions
from app.services.session_merge import next_week_day
from app.services.stores import archive_plan, create_plan, get_plan, save_session, sessions_by_day

router = APIRouter()


@router.post("", response_model=PlanRead, status_code=201)
async def create(
    payload: PlanCreate,
    db: AsyncSession = Depends(get_db),
):
    """Store a plan document (weeks -> days -> items)."""
    return await create_plan(db, payload)


@router.get("/{plan_id}", response_model=PlanRead)
async def read(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
):
    plan = await get_plan(db, plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan


@router.get("/{plan_id}/next-day", response_model=PlanPosition)
async def next_day(
    plan_id: int,
    week_id: str,
    day_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Day after (week_id, day_id) in plan order, wrapping to the first week after the last."""
    plan = await get_plan(db, plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    return next_week_day(plan, week_id, day_id)


@router.post("/{plan_id}/seed-ghosts")
async def seed_ghosts(
    plan_id: int,
    source_plan_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Carry the last logged week of the predecessor plan (or source_plan_id) into ghost-seed
    sessions for this plan's first week, so its first sessions get suggestions. The source
    plan is archived.
    """
    target = await get_plan(db, plan_id)
    if not target:
        raise HTTPException(status_code=404, detail="Plan not found")
    source_id = source_plan_id if source_plan_id is not None else target.predecessor_plan_id
    if source_id is None:
        raise HTTPException(status_code=400, detail="Plan has no predecessor; pass source_plan_id.")
    if source_id == plan_id:
        raise HTTPException(status_code=400, detail="A plan cannot seed itself.")
    source = await get_plan(db, source_id)
    if not source:
        raise HTTPException(status_code=404, detail="Source plan not found")

    seeded = seed_ghost_sessions(source, target, await sessions_by_day(db, source_id), now)
    for record in seeded:
        await save_session(db, plan_id, record)
    await archive_plan(db, source_id)
    return {"plan_id": plan_id, "source_plan_id": source_id, "seeded_days": [r.day_id for r in seeded]}
