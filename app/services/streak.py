"""Habit streak engine.

Pure functions over (config, state, now). `now` is always passed in; nothing here reads a
clock. All calendar math happens on local dates in the config's timezone.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.enums import StreakScheduleMode
from app.schemas.streak import StreakConfig, StreakEvaluation, StreakState

logger = logging.getLogger(__name__)


def resolve_timezone(name: str | None) -> ZoneInfo | timezone:
    """IANA zone for `name`; UTC when missing, unknown or not a zone file (e.g. "America")."""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.debug("Unknown timezone %r, falling back to UTC", name)
        return timezone.utc


def local_date(moment: datetime | date, tz_name: str | None) -> date:
    """Calendar date of `moment` in `tz_name`. Naive datetimes are UTC; plain dates pass through."""
    if not isinstance(moment, datetime):
        return moment
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(resolve_timezone(tz_name)).date()


def days_between(start: date, end: date) -> int:
    return (end - start).days


def weekday_sunday_first(d: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


def is_scheduled_day(config: StreakConfig | None, when: datetime | date) -> bool:
    if config is None or not config.enabled:
        return False
    day = local_date(when, config.timezone)

    if config.schedule_mode == StreakScheduleMode.DAILY:
        return True

    if config.schedule_mode == StreakScheduleMode.ROLLING:
        d = days_between(config.start_date, day)
        if d < 0:
            return False
        on = config.rolling_days_on or 0
        cycle = on + (config.rolling_days_off or 0)
        if cycle <= 0:
            return False
        return d % cycle < on

    if config.schedule_mode == StreakScheduleMode.WEEKLY:
        return weekday_sunday_first(day) in (config.weekly_days or set())

    return False


def _missed_scheduled_day(config: StreakConfig, last: date, today: date) -> date | None:
    """First scheduled day strictly between `last` and `today`, if any."""
    day = last + timedelta(days=1)
    while day < today:
        if is_scheduled_day(config, day):
            return day
        day += timedelta(days=1)
    return None


def evaluate_streak(
    config: StreakConfig | None,
    state: StreakState | None,
    now: datetime,
) -> StreakEvaluation:
    """
    Whether the stored streak still stands at `now`.

    A scheduled day between the last workout and today (both exclusive) with no workout breaks
    the streak. Unscheduled days in the gap never do.
    """
    if config is None or not config.enabled or state is None:
        return StreakEvaluation(current_streak=0, is_hit_today=False, streak_broken=False)

    today = local_date(now, config.timezone)
    last = state.last_workout_date
    if last is None:
        return StreakEvaluation(current_streak=0, is_hit_today=False, streak_broken=False)

    is_hit_today = last == today
    missed = _missed_scheduled_day(config, last, today)
    if missed is not None:
        logger.debug("Streak broken: scheduled day %s missed (last workout %s)", missed, last)
        return StreakEvaluation(current_streak=0, is_hit_today=is_hit_today, streak_broken=True)
    return StreakEvaluation(
        current_streak=state.current_streak,
        is_hit_today=is_hit_today,
        streak_broken=False,
    )


def reconcile_streak(
    config: StreakConfig | None,
    state: StreakState | None,
    now: datetime,
) -> StreakState | None:
    """Stored state with `current_streak` zeroed when the streak has been broken since."""
    if state is None:
        return None
    evaluation = evaluate_streak(config, state, now)
    if not evaluation.streak_broken or state.current_streak == 0:
        return state
    return state.model_copy(update={"current_streak": 0})


def record_workout_completion(
    config: StreakConfig | None,
    state: StreakState | None,
    now: datetime,
) -> StreakState | None:
    """
    Advance the streak for a workout completed at `now`.

    No-op when disabled, when today was already counted, or when today is not a scheduled day.
    """
    if config is None or not config.enabled:
        return state
    if state is None:
        state = StreakState(current_streak=0, longest_streak=0, last_workout_date=None)

    today = local_date(now, config.timezone)
    if state.last_workout_date == today:
        return state
    if not is_scheduled_day(config, today):
        return state

    new_streak = state.current_streak + 1
    return StreakState(
        current_streak=new_streak,
        longest_streak=max(new_streak, state.longest_streak),
        last_workout_date=today,
    )
