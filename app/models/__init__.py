"""ORM models - import all so Base.metadata is complete for migrations."""

from app.models.plan import Plan
from app.models.session import Completion, SessionRow
from app.models.user_prefs import UserPrefs

__all__ = [
    "Completion",
    "Plan",
    "SessionRow",
    "UserPrefs",
]
