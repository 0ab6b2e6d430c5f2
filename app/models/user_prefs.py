"""UserPrefs model - singleton preferences row (navigation state + streak JSONB)."""

from __future__ import annotations

import uuid

from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class UserPrefs(Base):
    """Singleton pattern: single row keyed by a fixed UUID (no auth yet).

    prefs: {"lastPlanId", "lastWeekId", "lastDayId", "streakConfig", "streakState"}
    """

    __tablename__ = "user_prefs"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    prefs: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
