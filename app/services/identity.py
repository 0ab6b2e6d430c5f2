"""Exercise identity: canonical match keys and the same-exercise rule.

A key is one of two tagged forms:
    "id:<id>"      when the reference carries a stable exercise id
    "name:<name>"  otherwise, name trimmed, lowercased, inner whitespace collapsed
"""

from __future__ import annotations

from app.schemas.plan import ExerciseRef

ID_PREFIX = "id:"
NAME_PREFIX = "name:"


def normalize_exercise_name(name: str | None) -> str:
    return " ".join((name or "").split()).lower()


def _clean_id(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def name_key(name: str | None) -> str:
    return f"{NAME_PREFIX}{normalize_exercise_name(name)}"


def match_key(ref: ExerciseRef) -> str:
    ex_id = _clean_id(ref.id)
    if ex_id is not None:
        return f"{ID_PREFIX}{ex_id}"
    return name_key(ref.name)


def lookup_keys(ref: ExerciseRef) -> list[str]:
    """Keys to try, in order, when reading a key-indexed map for this reference."""
    keys = []
    if _clean_id(ref.id) is not None:
        keys.append(match_key(ref))
    keys.append(name_key(ref.name))
    return keys


def same_exercise(a: ExerciseRef, b: ExerciseRef) -> bool:
    """
    Ids decide only when both sides have one. If either side predates id assignment,
    fall back to comparing normalized names.
    """
    a_id, b_id = _clean_id(a.id), _clean_id(b.id)
    if a_id is not None and b_id is not None:
        return a_id == b_id
    return normalize_exercise_name(a.name) == normalize_exercise_name(b.name)
