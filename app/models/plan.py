"""Plan model - weeks/days/exercises stored as one JSONB document."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Plan(Base):
    """A multi-week training plan.

    data: {"weeks": [{"id", "name", "days": [{"id", "name", "items": [...]}]}]}
    """

    __tablename__ = "plans"
    __table_args__ = (Index("ix_plans_created_at", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    data: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    ghost_mode: Mapped[str | None] = mapped_column(String(20), nullable=True)  # default, full_body
    archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    predecessor_plan_id: Mapped[int | None] = mapped_column(
        ForeignKey("plans.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
