"""Ghost value resolution: the suggested (weight, reps) shown for a set before it is logged.

Precedence for (exercise, set_index):
    1. same-day lineage ghost (previous occurrence of this plan day)
    2. cross-session history index
    3. the same two tiers at set_index - 1 (one step back only)
    4. empty
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime

from app.core.constants import DEFAULT_EXERCISE_NAME
from app.schemas.ghost import ExerciseGhosts, GhostSet, GhostValue
from app.schemas.plan import ExerciseRef, PlanDay, PlanRead
from app.schemas.session import SessionEntry, SessionRecord, SessionSet
from app.services.history_index import HistoryIndex, ScopeFilter, clean_ghost, index_lookup
from app.services.identity import lookup_keys, match_key, name_key, same_exercise

logger = logging.getLogger(__name__)

# {match_key: {set_index: GhostValue}}, name keys registered as aliases of id keys
SameDayGhost = dict[str, dict[int, GhostValue]]
# Latest stored session per (week_id, day_id) of one plan
SessionsByDay = Mapping[tuple[str, str], SessionRecord]

EMPTY_GHOST = GhostValue(weight=None, reps=None)


def _new_id() -> str:
    return str(uuid.uuid4())


def _entry_ghost_slots(entry: SessionEntry) -> dict[int, GhostValue]:
    slots: dict[int, GhostValue] = {}
    for position, s in enumerate(entry.sets):
        set_index = s.set_index if s.set_index is not None else position
        slots.setdefault(set_index, clean_ghost(s.weight, s.reps))
    return slots


def _same_day_lookup(ghost: SameDayGhost, ref: ExerciseRef, set_index: int) -> GhostValue | None:
    for key in lookup_keys(ref):
        slots = ghost.get(key)
        if slots and set_index in slots:
            value = clean_ghost(slots[set_index].weight, slots[set_index].reps)
            return value if value.has_value else None
    return None


def _tiered(
    ref: ExerciseRef,
    set_index: int,
    same_day_ghost: SameDayGhost,
    historical_index: HistoryIndex,
) -> GhostValue | None:
    value = _same_day_lookup(same_day_ghost, ref, set_index)
    if value is not None:
        return value
    value = index_lookup(historical_index, ref, set_index)
    if value is not None:
        value = clean_ghost(value.weight, value.reps)
        if value.has_value:
            return value
    return None


def resolve_ghost(
    ref: ExerciseRef,
    set_index: int,
    same_day_ghost: SameDayGhost | None,
    historical_index: HistoryIndex | None,
) -> GhostValue:
    same_day_ghost = same_day_ghost or {}
    historical_index = historical_index or {}

    value = _tiered(ref, set_index, same_day_ghost, historical_index)
    if value is not None:
        return value
    if set_index > 0:
        value = _tiered(ref, set_index - 1, same_day_ghost, historical_index)
        if value is not None:
            return value
    return EMPTY_GHOST.model_copy()


def resolve_day_ghosts(
    day: PlanDay,
    same_day_ghost: SameDayGhost | None,
    historical_index: HistoryIndex | None,
) -> list[ExerciseGhosts]:
    out = []
    for item in day.items:
        ref = item.ref
        sets = []
        for i in range(item.target_sets):
            g = resolve_ghost(ref, i, same_day_ghost, historical_index)
            sets.append(GhostSet(set_index=i, weight=g.weight, reps=g.reps))
        out.append(
            ExerciseGhosts(
                plan_exercise_id=item.id,
                exercise_id=item.exercise_id,
                exercise_name=item.exercise_name,
                sets=sets,
            )
        )
    return out


def ghost_from_seed(record: SessionRecord) -> SameDayGhost:
    """Ghost map from a ghost-seed session: every entry under its key and its name key."""
    ghost: SameDayGhost = {}
    for entry in record.entries:
        slots = _entry_ghost_slots(entry)
        ghost[match_key(entry.ref)] = slots
        ghost.setdefault(name_key(entry.exercise_name), slots)
    return ghost


def lineage_ghost(
    plan: PlanRead,
    week_id: str,
    day_id: str,
    sessions_by_day: SessionsByDay,
    scope_filter: ScopeFilter | None = None,
) -> tuple[SameDayGhost, dict[str, str | None]]:
    """
    Walk the plan's days backwards from (week_id, day_id). For each exercise of the current
    day, the nearest earlier session containing it provides the ghost sets and note.
    Sessions rejected by `scope_filter` are passed over.
    Returns (ghost map, notes map); both keyed by match key with name-key aliases.
    """
    ghost: SameDayGhost = {}
    notes: dict[str, str | None] = {}

    ordered = [(w.id, d.id) for w in plan.weeks for d in w.days]
    try:
        current_idx = ordered.index((week_id, day_id))
    except ValueError:
        return ghost, notes
    day = plan.find_day(week_id, day_id)
    if current_idx == 0 or day is None or not day.items:
        return ghost, notes

    targets = [item.ref for item in day.items]
    remaining = {match_key(t) for t in targets}

    for position in reversed(ordered[:current_idx]):
        if not remaining:
            break
        record = sessions_by_day.get(position)
        if record is None or (scope_filter is not None and not scope_filter(record)):
            continue
        for entry in record.entries:
            for target in targets:
                target_key = match_key(target)
                if target_key not in remaining or not same_exercise(entry.ref, target):
                    continue
                slots = _entry_ghost_slots(entry)
                ghost[target_key] = slots
                ghost.setdefault(name_key(target.name), slots)
                notes[target_key] = entry.note
                notes.setdefault(name_key(target.name), entry.note)
                remaining.discard(target_key)
    return ghost, notes


def build_same_day_ghost(
    plan: PlanRead,
    week_id: str,
    day_id: str,
    sessions_by_day: SessionsByDay,
    scope_filter: ScopeFilter | None = None,
) -> tuple[SameDayGhost, dict[str, str | None]]:
    """Seeded values for this day (if its latest session is a ghost seed) backed by the lineage walk."""
    ghost, notes = lineage_ghost(plan, week_id, day_id, sessions_by_day, scope_filter)
    latest = sessions_by_day.get((week_id, day_id))
    if latest is not None and latest.ghost_seed:
        seeded = ghost_from_seed(latest)
        seeded.update({k: v for k, v in ghost.items() if k not in seeded})
        ghost = seeded
    return ghost, notes


def seed_ghost_sessions(
    source: PlanRead,
    target: PlanRead,
    sessions_by_day: SessionsByDay,
    now: datetime,
    new_id: Callable[[], str] = _new_id,
) -> list[SessionRecord]:
    """
    Carry the last week of an archived plan into ghost-seed sessions for the first week of its
    successor. Days are paired by position; entries keep their logged sets.
    """
    if not source.weeks or not target.weeks:
        return []
    source_week = source.weeks[-1]
    target_week = target.weeks[0]

    seeded = []
    for i, target_day in enumerate(target_week.days):
        if i >= len(source_week.days):
            break
        record = sessions_by_day.get((source_week.id, source_week.days[i].id))
        if record is None or not record.entries:
            continue
        entries = []
        for entry_index, entry in enumerate(record.entries):
            fallback = target_day.items[entry_index] if entry_index < len(target_day.items) else None
            exercise_id = entry.exercise_id or (fallback.exercise_id if fallback else None)
            exercise_name = entry.exercise_name or (fallback.exercise_name if fallback else "") or DEFAULT_EXERCISE_NAME
            entries.append(
                SessionEntry(
                    id=new_id(),
                    exercise_id=exercise_id,
                    exercise_name=exercise_name,
                    sets=[
                        SessionSet(id=new_id(), set_index=set_index, weight=s.weight, reps=s.reps)
                        for set_index, s in enumerate(entry.sets)
                    ],
                )
            )
        seeded.append(
            SessionRecord(
                session_id=new_id(),
                plan_id=str(target.id),
                week_id=target_week.id,
                day_id=target_day.id,
                date=now.isoformat(),
                entries=entries,
                completed=False,
                ghost_seed=True,
            )
        )
    logger.info(
        "Seeded %d ghost sessions from plan %s into plan %s",
        len(seeded), source.id, target.id,
        extra={"lift_plan_id": target.id, "lift_source_plan_id": source.id},
    )
    return seeded
