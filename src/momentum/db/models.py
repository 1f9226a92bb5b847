"""ORM models for users, manual check-ins and raw health data.

The schema is created by Alembic revision 001_initial_schema; the column
definitions here must stay in sync with it.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    TypeDecorator,
    false,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import Mapped, mapped_column, relationship

from momentum.db.base import Base

# BIGINT identities on PostgreSQL; SQLite only autoincrements INTEGER primary keys.
Identifier = BigInteger().with_variant(Integer, "sqlite")


class UTCDateTime(TypeDecorator[dt.datetime]):
    """Timezone-aware UTC timestamps on every backend (SQLite drops the offset)."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: dt.datetime | None, dialect: Dialect) -> dt.datetime | None:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(dt.timezone.utc)
        return value

    def process_result_value(self, value: dt.datetime | None, dialect: Dialect) -> dt.datetime | None:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=dt.timezone.utc)
        return value


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table. Emails are stored lower-cased."""

    __tablename__ = "users"
    __table_args__ = (Index("ix_users_email", "email", unique=True),)

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    subscription_tier: Mapped[str] = mapped_column(String(32), nullable=False, default="free", server_default="free")
    onboarding_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False)

    checkins: Mapped[list[ManualCheckin]] = relationship(
        "ManualCheckin",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


# ---------------------------------------------------------------------------
# Manual check-ins
# ---------------------------------------------------------------------------


class ManualCheckin(Base):
    """One row per user per calendar date."""

    __tablename__ = "manual_checkins"
    __table_args__ = (Index("ix_manual_checkins_user_id_date", "user_id", "date", unique=True),)

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Identifier, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    # Sleep
    sleep_hours: Mapped[float | None] = mapped_column(Numeric(4, 2, asdecimal=False), nullable=True)
    sleep_quality: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sleep_notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Energy & mood
    energy_morning: Mapped[int | None] = mapped_column(Integer, nullable=True)
    energy_afternoon: Mapped[int | None] = mapped_column(Integer, nullable=True)
    energy_evening: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mood: Mapped[str | None] = mapped_column(String(50), nullable=True)
    stress_level: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Physical
    exercise_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    exercise_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    exercise_intensity: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Habits
    caffeine_mg: Mapped[int | None] = mapped_column(Integer, nullable=True)
    water_glasses: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ate_breakfast: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    screen_time_before_bed: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Productivity
    deep_work_hours: Mapped[float | None] = mapped_column(Numeric(4, 2, asdecimal=False), nullable=True)
    productivity_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False)

    user: Mapped[User] = relationship("User", back_populates="checkins")


# Mutable metric columns, in request order. Upserts and updates overwrite all of them.
CHECKIN_METRIC_FIELDS: tuple[str, ...] = (
    "sleep_hours",
    "sleep_quality",
    "sleep_notes",
    "energy_morning",
    "energy_afternoon",
    "energy_evening",
    "mood",
    "stress_level",
    "exercise_type",
    "exercise_duration",
    "exercise_intensity",
    "caffeine_mg",
    "water_glasses",
    "ate_breakfast",
    "screen_time_before_bed",
    "deep_work_hours",
    "productivity_rating",
    "notes",
)


# ---------------------------------------------------------------------------
# Raw health data (ingestion table, no API surface)
# ---------------------------------------------------------------------------


class RawHealthData(Base):
    """Raw payloads from external health sources, keyed by date and source."""

    __tablename__ = "raw_health_data"
    __table_args__ = (Index("ix_raw_health_data_date_source", "date", "source"),)

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    source: Mapped[str] = mapped_column(String(50), nullable=False)
    data_type: Mapped[str] = mapped_column(String(50), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    raw_json: Mapped[dict[str, Any]] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(UTCDateTime, nullable=False)
