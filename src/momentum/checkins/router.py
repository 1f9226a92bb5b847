"""Check-in router: all /api/checkin/* endpoints. Every route requires a bearer token."""

from __future__ import annotations

import datetime as dt
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from momentum.analytics.aggregation import checkin_stats, summarize
from momentum.auth.dependencies import get_current_user_id
from momentum.checkins.schemas import (
    AnalyticsResponse,
    CheckinRequest,
    CheckinResponse,
    CheckinStatsResponse,
)
from momentum.checkins.service import (
    create_or_update_checkin,
    delete_checkin,
    get_checkin_by_date,
    get_checkin_by_id,
    get_checkins_by_date,
    get_checkins_in_range,
    get_latest_checkin_by_date,
    get_recent_checkins,
    update_checkin,
)
from momentum.clock import Clock, get_clock
from momentum.config import get_settings
from momentum.database import get_session
from momentum.db.models import ManualCheckin
from momentum.errors import (
    CheckinConflictError,
    CheckinValidationError,
    InvalidDateRangeError,
    InvalidDaysError,
)

router = APIRouter(prefix="/api/checkin", tags=["Check-ins"])

_settings = get_settings()


def _not_found(message: str = "Check-in not found") -> HTTPException:
    return HTTPException(status_code=404, detail=message)


async def _recent(db: AsyncSession, clock: Clock, user_id: int, days: int) -> list[ManualCheckin]:
    try:
        return await get_recent_checkins(db, clock, user_id, days)
    except InvalidDaysError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


@router.post("", response_model=CheckinResponse, status_code=201)
async def submit_checkin(
    body: CheckinRequest,
    response: Response,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> CheckinResponse:
    """Create today's (or a past day's) check-in, or replace it if one exists. 201 on create, 200 on update."""
    try:
        record, created = await create_or_update_checkin(db, clock, user_id, body)
    except CheckinValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except CheckinConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    await db.commit()
    if not created:
        response.status_code = 200
    return CheckinResponse.model_validate(record)


@router.put("/{checkin_id}", response_model=CheckinResponse)
async def replace_checkin(
    checkin_id: int,
    body: CheckinRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> CheckinResponse:
    try:
        record = await update_checkin(db, clock, user_id, checkin_id, body)
    except CheckinValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except CheckinConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    if record is None:
        raise _not_found("Check-in not found or you don't have permission to update it")

    await db.commit()
    return CheckinResponse.model_validate(record)


@router.delete("/{checkin_id}", status_code=204)
async def remove_checkin(
    checkin_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Response:
    if not await delete_checkin(db, user_id, checkin_id):
        raise _not_found("Check-in not found or you don't have permission to delete it")
    await db.commit()
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Lists and analytics
# ---------------------------------------------------------------------------


@router.get("/recent", response_model=list[CheckinResponse])
async def recent_checkins(
    days: int = Query(_settings.recent_days_default),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> list[CheckinResponse]:
    """Check-ins from the last `days` days (1 to 90), newest first."""
    records = await _recent(db, clock, user_id, days)
    return [CheckinResponse.model_validate(r) for r in records]


@router.get("/range", response_model=list[CheckinResponse])
async def checkins_in_range(
    start_date: dt.date = Query(..., alias="startDate"),
    end_date: dt.date = Query(..., alias="endDate"),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[CheckinResponse]:
    """Check-ins between two dates inclusive, oldest first."""
    try:
        records = await get_checkins_in_range(db, user_id, start_date, end_date)
    except InvalidDateRangeError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return [CheckinResponse.model_validate(r) for r in records]


@router.get("/stats", response_model=CheckinStatsResponse)
async def stats(
    days: int = Query(_settings.analytics_days_default),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> CheckinStatsResponse:
    """Dashboard headline numbers over the last `days` days."""
    records = await _recent(db, clock, user_id, days)
    result = checkin_stats(records, clock.today())
    return CheckinStatsResponse(
        days=days,
        total_checkins=result.total_checkins,
        average_mood=result.average_mood,
        average_energy=result.average_energy,
        average_sleep=result.average_sleep,
        average_productivity=result.average_productivity,
        streak_days=result.streak_days,
    )


@router.get("/analytics", response_model=AnalyticsResponse)
async def analytics(
    days: int = Query(_settings.analytics_days_default),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> AnalyticsResponse:
    """Daily series, weekly trends and insights over the last `days` days."""
    records = await _recent(db, clock, user_id, days)
    summary = summarize(records, clock.today())
    return AnalyticsResponse.model_validate({"days": days, **asdict(summary)})


# ---------------------------------------------------------------------------
# Single-record reads
# ---------------------------------------------------------------------------


@router.get("/date/{date}", response_model=list[CheckinResponse])
async def checkins_for_date(
    date: dt.date,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[CheckinResponse]:
    """All check-ins for a date (zero or one), most recently updated first."""
    records = await get_checkins_by_date(db, user_id, date)
    return [CheckinResponse.model_validate(r) for r in records]


@router.get("/date/{date}/latest", response_model=CheckinResponse)
async def latest_checkin_for_date(
    date: dt.date,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> CheckinResponse:
    record = await get_latest_checkin_by_date(db, user_id, date)
    if record is None:
        raise _not_found(f"No check-in found for date {date.isoformat()}")
    return CheckinResponse.model_validate(record)


@router.get("/id/{checkin_id}", response_model=CheckinResponse)
async def checkin_by_id(
    checkin_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> CheckinResponse:
    record = await get_checkin_by_id(db, user_id, checkin_id)
    if record is None:
        raise _not_found()
    return CheckinResponse.model_validate(record)


@router.get("/{date}", response_model=CheckinResponse)
async def checkin_by_date(
    date: dt.date,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> CheckinResponse:
    record = await get_checkin_by_date(db, user_id, date)
    if record is None:
        raise _not_found(f"No check-in found for date {date.isoformat()}")
    return CheckinResponse.model_validate(record)
