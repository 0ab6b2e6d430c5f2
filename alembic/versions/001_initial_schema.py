"""Initial schema: plans, sessions, completions, user_prefs.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "plans",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("data", postgresql.JSONB(), nullable=True),
        sa.Column("ghost_mode", sa.String(length=20), nullable=True),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("predecessor_plan_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["predecessor_plan_id"], ["plans.id"],
            name="fk_plans_predecessor_plan_id_plans", ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_plans"),
    )
    op.create_index("ix_plans_created_at", "plans", ["created_at"], unique=False)

    op.create_table(
        "sessions",
        sa.Column("plan_id", sa.Integer(), nullable=False),
        sa.Column("week_id", sa.String(length=64), nullable=False),
        sa.Column("day_id", sa.String(length=64), nullable=False),
        sa.Column("data", postgresql.JSONB(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["plan_id"], ["plans.id"], name="fk_sessions_plan_id_plans", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("plan_id", "week_id", "day_id", name="pk_sessions"),
    )
    op.create_index("ix_sessions_updated_at", "sessions", ["updated_at"], unique=False)

    op.create_table(
        "completions",
        sa.Column("plan_id", sa.Integer(), nullable=False),
        sa.Column("week_id", sa.String(length=64), nullable=False),
        sa.Column("day_id", sa.String(length=64), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["plan_id"], ["plans.id"], name="fk_completions_plan_id_plans", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("plan_id", "week_id", "day_id", name="pk_completions"),
    )

    op.create_table(
        "user_prefs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("prefs", postgresql.JSONB(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_user_prefs"),
    )


def downgrade() -> None:
    op.drop_table("user_prefs")
    op.drop_table("completions")
    op.drop_index("ix_sessions_updated_at", table_name="sessions")
    op.drop_table("sessions")
    op.drop_index("ix_plans_created_at", table_name="plans")
    op.drop_table("plans")
