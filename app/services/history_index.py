"""Session history index: most recent valid (weight, reps) per exercise and set position.

Records are scanned newest to oldest; the first valid value seen for a (key, set_index)
slot wins and is never overwritten.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from app.schemas.ghost import ExerciseHistory, GhostValue, HistoryItem
from app.schemas.plan import ExerciseRef, PlanRead
from app.schemas.session import SessionRecord, SessionSet
from app.services.identity import match_key, name_key, normalize_exercise_name, same_exercise

logger = logging.getLogger(__name__)

HistoryIndex = dict[str, dict[int, GhostValue]]
ScopeFilter = Callable[[SessionRecord], bool]


def finite_or_none(value) -> float | int | None:
    """Numbers pass through; None, NaN, infinities, bools and non-numbers become None."""
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def clean_ghost(weight, reps) -> GhostValue:
    return GhostValue(weight=finite_or_none(weight), reps=finite_or_none(reps))


def valid_set_value(s: SessionSet) -> GhostValue | None:
    """Value of a set usable as history: both weight and reps must be finite numbers."""
    weight = finite_or_none(s.weight)
    reps = finite_or_none(s.reps)
    if weight is None or reps is None:
        return None
    return GhostValue(weight=weight, reps=reps)


def parse_session_date(raw: str | None) -> datetime | None:
    """ISO-8601 string -> aware datetime (naive values are taken as UTC). None if unparseable."""
    if not raw:
        return None
    text = raw.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def sort_newest_first(records: Iterable[SessionRecord]) -> list[SessionRecord]:
    """Drop records with unusable dates, then order newest first. Ties keep input order."""
    dated: list[tuple[datetime, SessionRecord]] = []
    for record in records:
        when = parse_session_date(record.date)
        if when is None:
            logger.debug("Skipping session %s: unparseable date %r", record.session_id, record.date)
            continue
        dated.append((when, record))
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [r for _, r in dated]


def full_body_scope(plan: PlanRead, day_id: str) -> ScopeFilter:
    """Records from any plan day whose name matches the current day's name."""
    current_name = None
    for week in plan.weeks:
        for day in week.days:
            if day.id == day_id:
                current_name = normalize_exercise_name(day.name)
                break
        if current_name is not None:
            break

    if current_name is None:
        eligible = {day_id}
    else:
        eligible = {
            day.id
            for week in plan.weeks
            for day in week.days
            if normalize_exercise_name(day.name) == current_name
        }
    return lambda record: record.day_id in eligible


def build_index(
    records: Iterable[SessionRecord],
    targets: Iterable[ExerciseRef],
    scope_filter: ScopeFilter | None = None,
) -> HistoryIndex:
    """
    Build {match_key: {set_index: GhostValue}} for the target exercises.

    The scope filter runs before the newest-first scan. Ghost-seed records are not logged
    sessions and never contribute.
    """
    eligible = [
        r for r in records
        if not r.ghost_seed and (scope_filter is None or scope_filter(r))
    ]
    ordered = sort_newest_first(eligible)

    target_list = list(targets)
    index: HistoryIndex = {}
    for record in ordered:
        for entry in record.entries:
            entry_ref = entry.ref
            for target in target_list:
                if not same_exercise(entry_ref, target):
                    continue
                slots = index.setdefault(match_key(target), {})
                for position, s in enumerate(entry.sets):
                    set_index = s.set_index if s.set_index is not None else position
                    if set_index in slots:
                        continue
                    value = valid_set_value(s)
                    if value is not None:
                        slots[set_index] = value
    return index


def index_lookup(index: HistoryIndex, ref: ExerciseRef, set_index: int) -> GhostValue | None:
    slots = index.get(match_key(ref))
    if not slots and ref.id:
        slots = index.get(name_key(ref.name))
    if not slots:
        return None
    return slots.get(set_index)


def exercise_history(records: Iterable[SessionRecord], ref: ExerciseRef) -> ExerciseHistory:
    """
    Every valid set logged for the exercise, newest first, with the personal record split out.
    PR: heaviest weight, then most reps, then most recent.
    """
    items: list[tuple[datetime, HistoryItem]] = []
    for record in sort_newest_first(r for r in records if not r.ghost_seed):
        when = parse_session_date(record.date)
        for entry in record.entries:
            if not same_exercise(entry.ref, ref):
                continue
            for s in entry.sets:
                value = valid_set_value(s)
                if value is None:
                    continue
                items.append((when, HistoryItem(date=record.date, weight=value.weight, reps=value.reps)))

    pr: tuple[datetime, HistoryItem] | None = None
    for when, item in items:
        if pr is None:
            pr = (when, item)
            continue
        best_when, best = pr
        if (item.weight, item.reps) > (best.weight, best.reps):
            pr = (when, item)
        elif (item.weight, item.reps) == (best.weight, best.reps) and when > best_when:
            pr = (when, item)

    if pr is None:
        return ExerciseHistory(pr=None, items=[])
    rest = [item for _, item in items if item is not pr[1]]
    return ExerciseHistory(pr=pr[1], items=rest)
