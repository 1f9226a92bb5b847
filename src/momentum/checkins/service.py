"""
Check-in business logic.

Every query is filtered by the owning user id, so a record that belongs to
someone else behaves exactly like a missing one. Writes follow one pattern:
load, apply the validated field set, bump `updated_at`, flush. The caller
commits.
"""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from momentum.config import get_settings
from momentum.db.models import CHECKIN_METRIC_FIELDS, ManualCheckin
from momentum.errors import (
    CheckinConflictError,
    CheckinValidationError,
    InvalidDateRangeError,
    InvalidDaysError,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from momentum.checkins.schemas import CheckinRequest
    from momentum.clock import Clock

logger = structlog.get_logger()

FUTURE_DATE_MESSAGE = "Check-in date cannot be in the future"
CONFLICT_MESSAGE = "A check-in already exists for this date"


def _validate(fields: CheckinRequest, clock: Clock) -> None:
    """Rules that need the clock; value ranges are checked by the request schema."""
    if fields.date > clock.today():
        raise CheckinValidationError([FUTURE_DATE_MESSAGE])


def _apply(record: ManualCheckin, fields: CheckinRequest) -> None:
    record.date = fields.date
    for name in CHECKIN_METRIC_FIELDS:
        setattr(record, name, getattr(fields, name))


async def _flush_or_conflict(db: AsyncSession, user_id: int, date: dt.date) -> None:
    """Flush pending writes; a unique (user, date) violation becomes CheckinConflictError."""
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.info("checkin_conflict", user_id=user_id, date=date.isoformat())
        raise CheckinConflictError(CONFLICT_MESSAGE) from e


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def create_checkin(
    db: AsyncSession,
    clock: Clock,
    user_id: int,
    fields: CheckinRequest,
) -> ManualCheckin:
    """
    Insert a new check-in.

    Raises:
        CheckinValidationError: If the date is in the future.
        CheckinConflictError: If the user already has a check-in for that date.
    """
    _validate(fields, clock)

    now = clock.now()
    record = ManualCheckin(user_id=user_id, created_at=now, updated_at=now)
    _apply(record, fields)
    db.add(record)
    await _flush_or_conflict(db, user_id, fields.date)

    logger.info("checkin_created", user_id=user_id, checkin_id=record.id, date=record.date.isoformat())
    return record


async def create_or_update_checkin(
    db: AsyncSession,
    clock: Clock,
    user_id: int,
    fields: CheckinRequest,
) -> tuple[ManualCheckin, bool]:
    """
    Upsert the user's check-in for `fields.date`.

    An existing record has every metric overwritten (omitted metrics become
    null) and keeps its `created_at`.

    Returns:
        Tuple of (record, created) where created is True for a new record.
    """
    _validate(fields, clock)

    existing = await get_checkin_by_date(db, user_id, fields.date)
    if existing is None:
        return await create_checkin(db, clock, user_id, fields), True

    _apply(existing, fields)
    existing.updated_at = clock.now()
    await _flush_or_conflict(db, user_id, fields.date)

    logger.info("checkin_updated", user_id=user_id, checkin_id=existing.id, date=existing.date.isoformat())
    return existing, False


async def update_checkin(
    db: AsyncSession,
    clock: Clock,
    user_id: int,
    checkin_id: int,
    fields: CheckinRequest,
) -> ManualCheckin | None:
    """
    Replace all mutable fields of an owned check-in, including its date.

    Returns None when the record does not exist or is not owned by the user.

    Raises:
        CheckinValidationError: If the new date is in the future.
        CheckinConflictError: If another of the user's check-ins already has the new date.
    """
    _validate(fields, clock)

    record = await get_checkin_by_id(db, user_id, checkin_id)
    if record is None:
        logger.info("checkin_not_found", user_id=user_id, checkin_id=checkin_id, action="update")
        return None

    if fields.date != record.date:
        other = await get_checkin_by_date(db, user_id, fields.date)
        if other is not None:
            logger.info("checkin_conflict", user_id=user_id, date=fields.date.isoformat())
            raise CheckinConflictError(CONFLICT_MESSAGE)

    _apply(record, fields)
    record.updated_at = clock.now()
    await _flush_or_conflict(db, user_id, fields.date)

    logger.info("checkin_updated", user_id=user_id, checkin_id=record.id, date=record.date.isoformat())
    return record


async def delete_checkin(db: AsyncSession, user_id: int, checkin_id: int) -> bool:
    """Delete an owned check-in. False when it does not exist or is not owned."""
    record = await get_checkin_by_id(db, user_id, checkin_id)
    if record is None:
        logger.info("checkin_not_found", user_id=user_id, checkin_id=checkin_id, action="delete")
        return False

    await db.delete(record)
    await db.flush()
    logger.info("checkin_deleted", user_id=user_id, checkin_id=checkin_id)
    return True


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_checkin_by_id(db: AsyncSession, user_id: int, checkin_id: int) -> ManualCheckin | None:
    result = await db.execute(
        select(ManualCheckin).where(ManualCheckin.id == checkin_id, ManualCheckin.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_checkin_by_date(db: AsyncSession, user_id: int, date: dt.date) -> ManualCheckin | None:
    result = await db.execute(
        select(ManualCheckin).where(ManualCheckin.user_id == user_id, ManualCheckin.date == date)
    )
    return result.scalar_one_or_none()


async def get_checkins_by_date(db: AsyncSession, user_id: int, date: dt.date) -> list[ManualCheckin]:
    """All of the user's check-ins for a date, most recently updated first (at most one)."""
    result = await db.execute(
        select(ManualCheckin)
        .where(ManualCheckin.user_id == user_id, ManualCheckin.date == date)
        .order_by(ManualCheckin.updated_at.desc(), ManualCheckin.id.desc())
    )
    return list(result.scalars().all())


async def get_latest_checkin_by_date(db: AsyncSession, user_id: int, date: dt.date) -> ManualCheckin | None:
    checkins = await get_checkins_by_date(db, user_id, date)
    return checkins[0] if checkins else None


async def get_recent_checkins(
    db: AsyncSession,
    clock: Clock,
    user_id: int,
    days: int = 7,
) -> list[ManualCheckin]:
    """
    Check-ins dated within the last `days` days, newest first.

    Raises:
        InvalidDaysError: If days is outside 1..recent_days_max. Checked before any query.
    """
    max_days = get_settings().recent_days_max
    if days < 1 or days > max_days:
        msg = f"Days parameter must be between 1 and {max_days}"
        raise InvalidDaysError(msg)

    cutoff = clock.today() - dt.timedelta(days=days)
    result = await db.execute(
        select(ManualCheckin)
        .where(ManualCheckin.user_id == user_id, ManualCheckin.date >= cutoff)
        .order_by(ManualCheckin.date.desc())
    )
    return list(result.scalars().all())


async def get_checkins_in_range(
    db: AsyncSession,
    user_id: int,
    start: dt.date,
    end: dt.date,
) -> list[ManualCheckin]:
    """
    Check-ins dated start..end inclusive, oldest first.

    Raises:
        InvalidDateRangeError: If start is after end or the range is too long.
    """
    if start > end:
        msg = "Start date must be on or before end date"
        raise InvalidDateRangeError(msg)
    max_days = get_settings().range_max_days
    if (end - start).days > max_days:
        msg = f"Date range cannot exceed {max_days} days"
        raise InvalidDateRangeError(msg)

    result = await db.execute(
        select(ManualCheckin)
        .where(
            ManualCheckin.user_id == user_id,
            ManualCheckin.date >= start,
            ManualCheckin.date <= end,
        )
        .order_by(ManualCheckin.date.asc())
    )
    return list(result.scalars().all())
