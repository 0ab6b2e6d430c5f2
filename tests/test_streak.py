"""Tests for streak scheduling, evaluation and completion recording."""

from datetime import date, datetime, timedelta, timezone

import pytest

from app.core.enums import StreakScheduleMode
from app.schemas.streak import StreakConfig, StreakState
from app.services.streak import (
    evaluate_streak,
    is_scheduled_day,
    local_date,
    reconcile_streak,
    record_workout_completion,
)

UTC = timezone.utc


def _config(mode=StreakScheduleMode.DAILY, **kwargs):
    kwargs.setdefault("enabled", True)
    kwargs.setdefault("start_date", date(2024, 1, 1))
    kwargs.setdefault("timezone", "UTC")
    return StreakConfig(schedule_mode=mode, **kwargs)


def _state(current, longest=None, last=None):
    return StreakState(
        current_streak=current,
        longest_streak=current if longest is None else longest,
        last_workout_date=last,
    )


@pytest.fixture
def mwf():
    # 2024-01-08 is a Monday
    return _config(StreakScheduleMode.WEEKLY, weekly_days={1, 3, 5})


class TestSchedule:
    def test_daily(self):
        assert is_scheduled_day(_config(), date(2030, 5, 5))

    def test_disabled_is_never_scheduled(self):
        assert not is_scheduled_day(_config(enabled=False), date(2024, 1, 2))

    def test_rolling_cycle(self):
        start = date(2024, 1, 1)
        cfg = _config(StreakScheduleMode.ROLLING, rolling_days_on=3, rolling_days_off=1, start_date=start)

        pattern = [is_scheduled_day(cfg, start + timedelta(days=i)) for i in range(8)]

        assert pattern == [True, True, True, False, True, True, True, False]

    def test_rolling_before_start(self):
        cfg = _config(StreakScheduleMode.ROLLING, rolling_days_on=3, rolling_days_off=1)
        assert not is_scheduled_day(cfg, date(2023, 12, 31))

    def test_rolling_zero_cycle(self):
        cfg = _config(StreakScheduleMode.ROLLING)
        assert not is_scheduled_day(cfg, date(2024, 1, 1))

    def test_weekly_uses_sunday_zero(self, mwf):
        assert is_scheduled_day(mwf, date(2024, 1, 8))  # Monday
        assert not is_scheduled_day(mwf, date(2024, 1, 9))  # Tuesday
        sunday_only = _config(StreakScheduleMode.WEEKLY, weekly_days={0})
        assert is_scheduled_day(sunday_only, date(2024, 1, 7))

    def test_same_local_day_same_decision(self):
        cfg = _config(StreakScheduleMode.WEEKLY, weekly_days={4}, timezone="America/New_York")
        # Both instants are Thursday 2024-01-11 in New York
        early = datetime(2024, 1, 11, 6, 0, tzinfo=UTC)
        late = datetime(2024, 1, 12, 4, 59, tzinfo=UTC)

        assert is_scheduled_day(cfg, early) and is_scheduled_day(cfg, late)
        assert not is_scheduled_day(cfg, datetime(2024, 1, 12, 5, 0, tzinfo=UTC))

    @pytest.mark.parametrize("name", ["Mars/Olympus_Mons", "America", "zoneinfo", "../etc"])
    def test_unknown_timezone_falls_back_to_utc(self, name):
        moment = datetime(2024, 1, 11, 23, 30, tzinfo=UTC)
        assert local_date(moment, name) == date(2024, 1, 11)

    def test_directory_timezone_does_not_break_schedule(self):
        cfg = _config(timezone="America")
        assert is_scheduled_day(cfg, datetime(2024, 1, 11, 8, 0, tzinfo=UTC))
        assert evaluate_streak(cfg, _state(2, last=date(2024, 1, 10)), datetime(2024, 1, 11, 8, 0, tzinfo=UTC)).current_streak == 2

    def test_naive_datetime_is_utc(self):
        assert local_date(datetime(2024, 1, 11, 23, 30), "Asia/Tokyo") == date(2024, 1, 12)


class TestEvaluate:
    def test_missed_scheduled_day_breaks(self, mwf):
        state = _state(4, last=date(2024, 1, 8))
        result = evaluate_streak(mwf, state, datetime(2024, 1, 12, 18, 0, tzinfo=UTC))

        assert result.streak_broken
        assert result.current_streak == 0
        assert not result.is_hit_today

    def test_unscheduled_gap_survives(self, mwf):
        state = _state(4, last=date(2024, 1, 12))
        result = evaluate_streak(mwf, state, datetime(2024, 1, 15, 7, 0, tzinfo=UTC))

        assert not result.streak_broken
        assert result.current_streak == 4

    def test_hit_today(self):
        state = _state(2, last=date(2024, 1, 10))
        result = evaluate_streak(_config(), state, datetime(2024, 1, 10, 20, 0, tzinfo=UTC))

        assert result.is_hit_today and not result.streak_broken and result.current_streak == 2

    def test_hit_today_in_local_timezone(self):
        cfg = _config(timezone="America/New_York")
        state = _state(2, last=date(2024, 1, 10))
        # 03:00 UTC on the 11th is still the evening of the 10th in New York
        result = evaluate_streak(cfg, state, datetime(2024, 1, 11, 3, 0, tzinfo=UTC))

        assert result.is_hit_today

    def test_daily_yesterday_is_intact(self):
        state = _state(5, last=date(2024, 1, 10))
        assert not evaluate_streak(_config(), state, datetime(2024, 1, 11, 8, tzinfo=UTC)).streak_broken

    def test_daily_two_days_ago_breaks(self):
        state = _state(5, last=date(2024, 1, 9))
        assert evaluate_streak(_config(), state, datetime(2024, 1, 11, 8, tzinfo=UTC)).streak_broken

    def test_no_last_workout(self):
        result = evaluate_streak(_config(), _state(0), datetime(2024, 1, 11, tzinfo=UTC))
        assert (result.current_streak, result.is_hit_today, result.streak_broken) == (0, False, False)

    def test_disabled_or_missing_state(self):
        now = datetime(2024, 1, 11, tzinfo=UTC)
        assert evaluate_streak(_config(enabled=False), _state(3, last=date(2024, 1, 1)), now).current_streak == 0
        assert evaluate_streak(_config(), None, now).current_streak == 0
        assert evaluate_streak(None, _state(3), now).current_streak == 0


class TestRecordWorkout:
    def test_daily_increment(self):
        state = _state(5, 5, date(2024, 1, 10))
        new = record_workout_completion(_config(), state, datetime(2024, 1, 11, 8, 0, tzinfo=UTC))

        assert new == StreakState(current_streak=6, longest_streak=6, last_workout_date=date(2024, 1, 11))

    def test_same_day_twice_counts_once(self):
        cfg = _config()
        now = datetime(2024, 1, 11, 8, 0, tzinfo=UTC)
        once = record_workout_completion(cfg, _state(1, 3, date(2024, 1, 10)), now)
        twice = record_workout_completion(cfg, once, now + timedelta(hours=10))

        assert once.current_streak == 2
        assert twice == once

    def test_longest_kept_when_higher(self):
        new = record_workout_completion(_config(), _state(1, 9, date(2024, 1, 10)), datetime(2024, 1, 11, tzinfo=UTC))
        assert (new.current_streak, new.longest_streak) == (2, 9)

    def test_off_day_is_noop(self, mwf):
        state = _state(3, last=date(2024, 1, 8))
        tuesday = datetime(2024, 1, 9, 12, 0, tzinfo=UTC)
        assert record_workout_completion(mwf, state, tuesday) is state

    def test_disabled_is_noop(self):
        state = _state(3, last=date(2024, 1, 8))
        assert record_workout_completion(_config(enabled=False), state, datetime(2024, 1, 9, tzinfo=UTC)) is state

    def test_first_workout_from_empty_state(self):
        new = record_workout_completion(_config(), None, datetime(2024, 1, 1, 9, tzinfo=UTC))
        assert new == StreakState(current_streak=1, longest_streak=1, last_workout_date=date(2024, 1, 1))


class TestReconcile:
    def test_broken_streak_resets_current_only(self, mwf):
        state = _state(4, 7, date(2024, 1, 8))
        fixed = reconcile_streak(mwf, state, datetime(2024, 1, 12, tzinfo=UTC))

        assert fixed == StreakState(current_streak=0, longest_streak=7, last_workout_date=date(2024, 1, 8))

    def test_intact_streak_untouched(self, mwf):
        state = _state(4, 7, date(2024, 1, 12))
        assert reconcile_streak(mwf, state, datetime(2024, 1, 15, tzinfo=UTC)) is state
