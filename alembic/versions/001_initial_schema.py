"""Initial schema: users, manual check-ins and raw health data.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-10-29
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_id = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
_hours = sa.Numeric(4, 2)


def upgrade() -> None:
    """Create all tables."""
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", _id, autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("subscription_tier", sa.String(32), server_default="free", nullable=False),
        sa.Column("onboarding_complete", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # --- manual_checkins ---
    op.create_table(
        "manual_checkins",
        sa.Column("id", _id, autoincrement=True, nullable=False),
        sa.Column("user_id", _id, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("sleep_hours", _hours, nullable=True),
        sa.Column("sleep_quality", sa.Integer(), nullable=True),
        sa.Column("sleep_notes", sa.String(500), nullable=True),
        sa.Column("energy_morning", sa.Integer(), nullable=True),
        sa.Column("energy_afternoon", sa.Integer(), nullable=True),
        sa.Column("energy_evening", sa.Integer(), nullable=True),
        sa.Column("mood", sa.String(50), nullable=True),
        sa.Column("stress_level", sa.Integer(), nullable=True),
        sa.Column("exercise_type", sa.String(100), nullable=True),
        sa.Column("exercise_duration", sa.Integer(), nullable=True),
        sa.Column("exercise_intensity", sa.Integer(), nullable=True),
        sa.Column("caffeine_mg", sa.Integer(), nullable=True),
        sa.Column("water_glasses", sa.Integer(), nullable=True),
        sa.Column("ate_breakfast", sa.Boolean(), nullable=True),
        sa.Column("screen_time_before_bed", sa.Integer(), nullable=True),
        sa.Column("deep_work_hours", _hours, nullable=True),
        sa.Column("productivity_rating", sa.Integer(), nullable=True),
        sa.Column("notes", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_manual_checkins"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_manual_checkins_user_id_users",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_manual_checkins_user_id_date",
        "manual_checkins",
        ["user_id", "date"],
        unique=True,
    )

    # --- raw_health_data ---
    op.create_table(
        "raw_health_data",
        sa.Column("id", _id, autoincrement=True, nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("data_type", sa.String(50), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("raw_json", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_raw_health_data"),
    )
    op.create_index("ix_raw_health_data_date_source", "raw_health_data", ["date", "source"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_raw_health_data_date_source", table_name="raw_health_data")
    op.drop_table("raw_health_data")
    op.drop_index("ix_manual_checkins_user_id_date", table_name="manual_checkins")
    op.drop_table("manual_checkins")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
