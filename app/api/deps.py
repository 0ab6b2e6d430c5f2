"""Shared request dependencies."""

from datetime import datetime, timezone


def get_now() -> datetime:
    """The request's single reading of the clock; services take it as an argument."""
    return datetime.now(timezone.utc)
