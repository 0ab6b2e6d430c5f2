"""Keep a live session structurally aligned with its plan day.

The plan is authoritative: entries follow plan order, exercises removed from the plan are
dropped, and logged weights/reps/notes survive wherever the exercise still matches.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from datetime import datetime

from app.schemas.plan import PlanDay, PlanPosition, PlanRead
from app.schemas.session import SessionEntry, SessionRecord, SessionSet
from app.services.identity import lookup_keys, same_exercise


def _new_id() -> str:
    return str(uuid.uuid4())


def start_session_from_day(
    plan: PlanRead,
    week_id: str,
    day: PlanDay,
    now: datetime,
    new_id: Callable[[], str] = _new_id,
) -> SessionRecord:
    """Fresh session for a plan day: `target_sets` empty slots per exercise."""
    return SessionRecord(
        session_id=new_id(),
        plan_id=str(plan.id),
        week_id=week_id,
        day_id=day.id,
        date=now.isoformat(),
        entries=[
            SessionEntry(
                id=new_id(),
                exercise_id=item.exercise_id,
                exercise_name=item.exercise_name,
                sets=[
                    SessionSet(id=new_id(), set_index=i, weight=None, reps=None)
                    for i in range(item.target_sets)
                ],
                note=None,
            )
            for item in day.items
        ],
        completed=False,
    )


def merge_session_with_day(
    plan_day: PlanDay,
    prior: SessionRecord,
    new_id: Callable[[], str] = _new_id,
) -> SessionRecord:
    entries: list[SessionEntry] = []
    for item in plan_day.items:
        target = item.ref
        existing = next((e for e in prior.entries if same_exercise(e.ref, target)), None)

        sets = []
        for i in range(item.target_sets):
            old = existing.sets[i] if existing is not None and i < len(existing.sets) else None
            sets.append(
                SessionSet(
                    id=(old.id if old is not None and old.id else new_id()),
                    set_index=i,
                    weight=old.weight if old is not None else None,
                    reps=old.reps if old is not None else None,
                )
            )

        entries.append(
            SessionEntry(
                id=(existing.id if existing is not None and existing.id else new_id()),
                exercise_id=item.exercise_id or (existing.exercise_id if existing is not None else None),
                exercise_name=item.exercise_name,
                sets=sets,
                note=existing.note if existing is not None else None,
            )
        )
    return prior.model_copy(update={"entries": entries})


def session_shape(record: SessionRecord) -> list[tuple[str, int]]:
    return [(e.exercise_name, len(e.sets)) for e in record.entries]


def session_shape_changed(a: SessionRecord, b: SessionRecord) -> bool:
    """Change detection for write-back: only (exercise name, set count) per entry is compared."""
    return session_shape(a) != session_shape(b)


def seed_notes(record: SessionRecord, previous_notes: Mapping[str, str | None]) -> SessionRecord:
    """Fill blank entry notes from the previous occurrence of the same exercise."""
    entries = []
    changed = False
    for entry in record.entries:
        if entry.note and entry.note.strip():
            entries.append(entry)
            continue
        suggested = None
        for key in lookup_keys(entry.ref):
            suggested = previous_notes.get(key)
            if suggested:
                break
        if not suggested or not suggested.strip():
            entries.append(entry)
            continue
        entries.append(entry.model_copy(update={"note": suggested}))
        changed = True
    if not changed:
        return record
    return record.model_copy(update={"entries": entries})


def first_week_day(plan: PlanRead) -> PlanPosition:
    week = plan.weeks[0] if plan.weeks else None
    day = week.days[0] if week is not None and week.days else None
    return PlanPosition(week_id=week.id if week else None, day_id=day.id if day else None)


def next_week_day(plan: PlanRead, week_id: str, day_id: str) -> PlanPosition:
    """Next day in plan order; after the last day of the last week, wrap to the first week."""
    w_idx = next((i for i, w in enumerate(plan.weeks) if w.id == week_id), -1)
    if w_idx < 0:
        return first_week_day(plan)
    days = plan.weeks[w_idx].days
    d_idx = next((i for i, d in enumerate(days) if d.id == day_id), -1)
    if d_idx < 0:
        return first_week_day(plan)
    if d_idx < len(days) - 1:
        return PlanPosition(week_id=plan.weeks[w_idx].id, day_id=days[d_idx + 1].id)

    # Skip weeks without days when wrapping
    for step in range(1, len(plan.weeks) + 1):
        week = plan.weeks[(w_idx + step) % len(plan.weeks)]
        if week.days:
            return PlanPosition(week_id=week.id, day_id=week.days[0].id)
    return first_week_day(plan)
