"""Shared enums for models and API."""

from enum import Enum


class StreakScheduleMode(str, Enum):
    """Which calendar days a streak expects a workout on."""

    DAILY = "daily"  # Every day
    ROLLING = "rolling"  # N days on, M days off, repeating from start date
    WEEKLY = "weekly"  # Fixed weekdays (0=Sunday)


class GhostMode(str, Enum):
    """Which history records feed the cross-session ghost tier."""

    DEFAULT = "default"  # All sessions
    FULL_BODY = "full_body"  # Only sessions from days sharing the current day's name
