"""Tests for session/plan merge, session start, note seeding and plan navigation."""

import itertools
from datetime import datetime, timezone

import pytest

from app.schemas.plan import PlanDay, PlanExercise, PlanRead, PlanWeek
from app.schemas.session import SessionEntry, SessionRecord, SessionSet
from app.services.session_merge import (
    merge_session_with_day,
    next_week_day,
    seed_notes,
    session_shape_changed,
    start_session_from_day,
)


@pytest.fixture
def ids():
    counter = itertools.count()
    return lambda: f"new-{next(counter)}"


def _item(item_id, name, sets, exercise_id=None):
    return PlanExercise(id=item_id, exercise_id=exercise_id, exercise_name=name, target_sets=sets)


def _entry(entry_id, name, values, exercise_id=None, note=None):
    return SessionEntry(
        id=entry_id,
        exercise_id=exercise_id,
        exercise_name=name,
        sets=[
            SessionSet(id=f"{entry_id}-s{i}", set_index=i, weight=w, reps=r)
            for i, (w, r) in enumerate(values)
        ],
        note=note,
    )


def _session(entries):
    return SessionRecord(
        session_id="s1", plan_id="1", week_id="w1", day_id="d1",
        date="2024-01-01T09:00:00Z", entries=entries,
    )


class TestMerge:
    def test_plan_order_and_values_preserved(self, ids):
        day = PlanDay(id="d1", name="Push", items=[_item("i1", "Overhead Press", 2), _item("i2", "Bench Press", 3)])
        prior = _session([
            _entry("e1", "Bench Press", [(80, 8), (80, 7), (75, 9)], note="arch"),
            _entry("e2", "overhead press", [(40, 10), (40, 9)]),
        ])

        merged = merge_session_with_day(day, prior, new_id=ids)

        assert [e.exercise_name for e in merged.entries] == ["Overhead Press", "Bench Press"]
        assert [e.id for e in merged.entries] == ["e2", "e1"]
        assert [(s.weight, s.reps) for s in merged.entries[1].sets] == [(80, 8), (80, 7), (75, 9)]
        assert merged.entries[1].note == "arch"
        assert merged.entries[0].note is None

    def test_new_slots_are_empty(self, ids):
        day = PlanDay(id="d1", items=[_item("i1", "Bench Press", 4)])
        prior = _session([_entry("e1", "Bench Press", [(80, 8)])])

        sets = merge_session_with_day(day, prior, new_id=ids).entries[0].sets

        assert [(s.set_index, s.weight, s.reps) for s in sets] == [
            (0, 80, 8), (1, None, None), (2, None, None), (3, None, None)
        ]
        assert sets[0].id == "e1-s0"
        assert sets[1].id.startswith("new-")

    def test_extra_sets_are_trimmed(self, ids):
        day = PlanDay(id="d1", items=[_item("i1", "Bench Press", 1)])
        prior = _session([_entry("e1", "Bench Press", [(80, 8), (80, 7)])])

        assert len(merge_session_with_day(day, prior, new_id=ids).entries[0].sets) == 1

    def test_orphans_dropped(self, ids):
        day = PlanDay(id="d1", items=[_item("i1", "Bench Press", 1)])
        prior = _session([_entry("e1", "Bench Press", [(80, 8)]), _entry("e2", "Dips", [(0, 12)])])

        merged = merge_session_with_day(day, prior, new_id=ids)

        assert [e.exercise_name for e in merged.entries] == ["Bench Press"]

    def test_unmatched_plan_item_gets_fresh_entry(self, ids):
        day = PlanDay(id="d1", items=[_item("i1", "Cable Fly", 2)])
        merged = merge_session_with_day(day, _session([]), new_id=ids)

        entry = merged.entries[0]
        assert entry.id.startswith("new-")
        assert entry.note is None
        assert all(s.weight is None and s.reps is None for s in entry.sets)

    def test_id_mismatch_is_not_a_match(self, ids):
        day = PlanDay(id="d1", items=[_item("i1", "Bench Press", 1, exercise_id="a")])
        prior = _session([_entry("e1", "Bench Press", [(80, 8)], exercise_id="b")])

        merged = merge_session_with_day(day, prior, new_id=ids)

        assert merged.entries[0].sets[0].weight is None

    def test_idempotent(self, ids):
        day = PlanDay(id="d1", items=[_item("i1", "Squat", 3), _item("i2", "Leg Curl", 2, exercise_id="lc")])
        prior = _session([
            _entry("e1", "Leg Curl", [(30, 12)]),
            _entry("e2", "squat", [(100, 5), (100, 5), (100, 5), (90, 8)], note="belt"),
            _entry("e3", "Calf Raise", [(50, 15)]),
        ])

        once = merge_session_with_day(day, prior, new_id=ids)
        twice = merge_session_with_day(day, once, new_id=ids)

        assert twice == once

    def test_session_fields_other_than_entries_kept(self, ids):
        day = PlanDay(id="d1", items=[])
        prior = _session([]).model_copy(update={"completed": True})

        merged = merge_session_with_day(day, prior, new_id=ids)

        assert merged.completed and merged.session_id == "s1" and merged.date == prior.date


class TestShapeChange:
    def test_only_names_and_set_counts_matter(self):
        a = _session([_entry("e1", "Bench Press", [(80, 8)])])
        b = _session([_entry("e1", "Bench Press", [(100, 1)])])
        c = _session([_entry("e1", "Bench Press", [(80, 8), (None, None)])])

        assert not session_shape_changed(a, b)
        assert session_shape_changed(a, c)


class TestStartAndNotes:
    def test_start_session_from_day(self, ids):
        plan = PlanRead(id=3, name="P", weeks=[])
        day = PlanDay(id="d1", items=[_item("i1", "Bench Press", 2, exercise_id="bp")])
        now = datetime(2024, 1, 11, 8, 0, tzinfo=timezone.utc)

        rec = start_session_from_day(plan, "w1", day, now, new_id=ids)

        assert (rec.plan_id, rec.week_id, rec.day_id, rec.completed) == ("3", "w1", "d1", False)
        assert rec.date == "2024-01-11T08:00:00+00:00"
        assert rec.entries[0].exercise_id == "bp"
        assert [(s.set_index, s.weight) for s in rec.entries[0].sets] == [(0, None), (1, None)]

    def test_seed_notes_fills_blanks_only(self):
        rec = _session([
            _entry("e1", "Bench Press", [], note=None),
            _entry("e2", "Row", [], note="keep mine"),
            _entry("e3", "Curl", [], note="  "),
        ])
        notes = {"name:bench press": "pause at chest", "name:row": "other", "name:curl": None}

        seeded = seed_notes(rec, notes)

        assert [e.note for e in seeded.entries] == ["pause at chest", "keep mine", "  "]

    def test_seed_notes_returns_same_object_when_nothing_changes(self):
        rec = _session([_entry("e1", "Bench Press", [], note="x")])
        assert seed_notes(rec, {"name:bench press": "y"}) is rec


class TestNavigation:
    @pytest.fixture
    def plan(self):
        return PlanRead(
            id=1,
            name="P",
            weeks=[
                PlanWeek(id="w1", days=[PlanDay(id="a"), PlanDay(id="b")]),
                PlanWeek(id="w2", days=[PlanDay(id="c")]),
            ],
        )

    def test_next_in_week(self, plan):
        pos = next_week_day(plan, "w1", "a")
        assert (pos.week_id, pos.day_id) == ("w1", "b")

    def test_next_week(self, plan):
        pos = next_week_day(plan, "w1", "b")
        assert (pos.week_id, pos.day_id) == ("w2", "c")

    def test_wraps_to_first_week(self, plan):
        pos = next_week_day(plan, "w2", "c")
        assert (pos.week_id, pos.day_id) == ("w1", "a")

    def test_unknown_resets_to_start(self, plan):
        pos = next_week_day(plan, "w9", "z")
        assert (pos.week_id, pos.day_id) == ("w1", "a")

    def test_empty_plan(self):
        pos = next_week_day(PlanRead(id=1, name="P"), "w1", "a")
        assert pos.week_id is None and pos.day_id is None
