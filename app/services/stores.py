"""Persistence collaborators: plans, sessions, completions and user prefs.

The core services never touch the database; endpoints load data through these helpers,
hand plain schema objects to the core, and write results back here.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.plan import Plan
from app.models.session import Completion, SessionRow
from app.models.user_prefs import UserPrefs
from app.schemas.plan import PlanCreate, PlanRead
from app.schemas.prefs import UserPrefsData
from app.schemas.session import SessionRecord
from app.schemas.streak import StreakConfig, StreakState

logger = logging.getLogger(__name__)

# Singleton user until auth: one user_prefs row with this UUID as primary key.
PREFS_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")


# ---- Plans ----


def plan_from_row(row: Plan) -> PlanRead:
    data = row.data or {}
    return PlanRead.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "weeks": data.get("weeks", []),
            "ghost_mode": row.ghost_mode,
            "archived": bool(row.archived),
            "predecessor_plan_id": row.predecessor_plan_id,
            "created_at": row.created_at,
        }
    )


async def get_plan(db: AsyncSession, plan_id: int) -> PlanRead | None:
    result = await db.execute(select(Plan).where(Plan.id == plan_id))
    row = result.scalar_one_or_none()
    return plan_from_row(row) if row else None


async def create_plan(db: AsyncSession, payload: PlanCreate) -> PlanRead:
    data = payload.model_dump(mode="json", by_alias=True, include={"weeks"})
    row = Plan(
        name=payload.name,
        data=data,
        ghost_mode=payload.ghost_mode.value if payload.ghost_mode else None,
        predecessor_plan_id=payload.predecessor_plan_id,
    )
    db.add(row)
    await db.flush()
    await db.refresh(row)
    return plan_from_row(row)


async def archive_plan(db: AsyncSession, plan_id: int) -> None:
    result = await db.execute(select(Plan).where(Plan.id == plan_id))
    row = result.scalar_one_or_none()
    if row is not None and not row.archived:
        row.archived = True
        await db.flush()
        logger.info("Archived plan %s", plan_id, extra={"lift_plan_id": plan_id})


# ---- Sessions ----


def _record_from_row(row: SessionRow) -> SessionRecord | None:
    """Stored document -> SessionRecord; None (logged) when the document does not validate."""
    if not row.data:
        return None
    try:
        record = SessionRecord.model_validate(row.data)
    except ValidationError as e:
        logger.warning(
            "Skipping unreadable session %s/%s/%s: %s",
            row.plan_id, row.week_id, row.day_id, e.error_count(),
            extra={"lift_plan_id": row.plan_id},
        )
        return None
    updates: dict[str, Any] = {}
    if not record.date and row.updated_at is not None:
        updates["date"] = row.updated_at.isoformat()
    if record.plan_id is None:
        updates["plan_id"] = str(row.plan_id)
    return record.model_copy(update=updates) if updates else record


async def list_all_sessions(db: AsyncSession) -> list[SessionRecord]:
    """Every stored session, newest first by last save."""
    result = await db.execute(select(SessionRow).order_by(SessionRow.updated_at.desc()))
    records = []
    for row in result.scalars().all():
        record = _record_from_row(row)
        if record is not None:
            records.append(record)
    return records


async def sessions_by_day(db: AsyncSession, plan_id: int) -> dict[tuple[str, str], SessionRecord]:
    result = await db.execute(select(SessionRow).where(SessionRow.plan_id == plan_id))
    out: dict[tuple[str, str], SessionRecord] = {}
    for row in result.scalars().all():
        record = _record_from_row(row)
        if record is not None:
            out[(row.week_id, row.day_id)] = record
    return out


async def last_session_for_day(
    db: AsyncSession, plan_id: int, week_id: str, day_id: str
) -> SessionRecord | None:
    result = await db.execute(
        select(SessionRow).where(
            SessionRow.plan_id == plan_id,
            SessionRow.week_id == week_id,
            SessionRow.day_id == day_id,
        )
    )
    row = result.scalar_one_or_none()
    return _record_from_row(row) if row else None


async def save_session(db: AsyncSession, plan_id: int, record: SessionRecord) -> SessionRecord:
    """Insert or replace the stored session for (plan, week, day)."""
    data = record.model_dump(mode="json", by_alias=True)
    result = await db.execute(
        select(SessionRow).where(
            SessionRow.plan_id == plan_id,
            SessionRow.week_id == record.week_id,
            SessionRow.day_id == record.day_id,
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        row = SessionRow(plan_id=plan_id, week_id=record.week_id, day_id=record.day_id, data=data)
        db.add(row)
    else:
        row.data = data
    await db.flush()
    return record


async def is_completed(db: AsyncSession, plan_id: int, week_id: str, day_id: str) -> bool:
    result = await db.execute(
        select(Completion).where(
            Completion.plan_id == plan_id,
            Completion.week_id == week_id,
            Completion.day_id == day_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def mark_completed(db: AsyncSession, plan_id: int, week_id: str, day_id: str) -> None:
    if not await is_completed(db, plan_id, week_id, day_id):
        db.add(Completion(plan_id=plan_id, week_id=week_id, day_id=day_id))
        await db.flush()


# ---- User prefs ----


def _prefs_from_doc(doc: dict | None) -> UserPrefsData:
    """Read each part on its own so a bad streak blob does not hide navigation state."""
    doc = doc or {}
    prefs = UserPrefsData(
        last_plan_id=doc.get("lastPlanId"),
        last_week_id=doc.get("lastWeekId"),
        last_day_id=doc.get("lastDayId"),
    )
    if doc.get("streakConfig") is not None:
        try:
            prefs.streak_config = StreakConfig.model_validate(doc["streakConfig"])
        except ValidationError:
            logger.warning("Ignoring unreadable stored streak config")
    if doc.get("streakState") is not None:
        try:
            prefs.streak_state = StreakState.model_validate(doc["streakState"])
        except ValidationError:
            logger.warning("Ignoring unreadable stored streak state")
    return prefs


async def _get_prefs_row(db: AsyncSession) -> UserPrefs | None:
    result = await db.execute(select(UserPrefs).where(UserPrefs.id == PREFS_ID))
    return result.scalar_one_or_none()


async def load_prefs(db: AsyncSession) -> UserPrefsData:
    row = await _get_prefs_row(db)
    return _prefs_from_doc(row.prefs if row else None)


async def save_prefs(db: AsyncSession, partial: dict[str, Any]) -> UserPrefsData:
    """
    Merge `partial` (snake_case keys of UserPrefsData) into the stored document.
    Keys not present in `partial` keep their stored value.
    """
    row = await _get_prefs_row(db)
    existing = dict(row.prefs or {}) if row else {}
    update = UserPrefsData.model_validate(partial).model_dump(
        mode="json", by_alias=True, include=set(partial)
    )
    merged = {**existing, **update}
    if row is None:
        db.add(UserPrefs(id=PREFS_ID, prefs=merged))
    else:
        row.prefs = merged
    await db.flush()
    return _prefs_from_doc(merged)
