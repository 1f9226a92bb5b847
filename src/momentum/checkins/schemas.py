"""Request/response schemas for check-in endpoints.

Every metric is optional: null or omitted means "not reported", which the
server stores as NULL. There is no default rating value.
"""

from __future__ import annotations

import datetime as dt

from pydantic import Field

from momentum.schemas import CamelModel

# Largest value an Integer column holds on PostgreSQL.
MAX_COUNT = 2_147_483_647


class CheckinRequest(CamelModel):
    """Body for creating, upserting or replacing a check-in."""

    date: dt.date

    # Sleep
    sleep_hours: float | None = Field(None, ge=0, le=24)
    sleep_quality: int | None = Field(None, ge=1, le=10)
    sleep_notes: str | None = Field(None, max_length=500)

    # Energy & mood
    energy_morning: int | None = Field(None, ge=1, le=10)
    energy_afternoon: int | None = Field(None, ge=1, le=10)
    energy_evening: int | None = Field(None, ge=1, le=10)
    mood: str | None = Field(None, max_length=50)
    stress_level: int | None = Field(None, ge=1, le=10)

    # Physical
    exercise_type: str | None = Field(None, max_length=100)
    exercise_duration: int | None = Field(None, ge=0, le=MAX_COUNT)
    exercise_intensity: int | None = Field(None, ge=1, le=10)

    # Habits
    caffeine_mg: int | None = Field(None, ge=0, le=MAX_COUNT)
    water_glasses: int | None = Field(None, ge=0, le=MAX_COUNT)
    ate_breakfast: bool | None = None
    screen_time_before_bed: int | None = Field(None, ge=0, le=MAX_COUNT)

    # Productivity
    deep_work_hours: float | None = Field(None, ge=0, le=24)
    productivity_rating: int | None = Field(None, ge=1, le=10)
    notes: str | None = Field(None, max_length=1000)


class CheckinResponse(CamelModel):
    id: int
    user_id: int
    date: dt.date
    sleep_hours: float | None = None
    sleep_quality: int | None = None
    sleep_notes: str | None = None
    energy_morning: int | None = None
    energy_afternoon: int | None = None
    energy_evening: int | None = None
    mood: str | None = None
    stress_level: int | None = None
    exercise_type: str | None = None
    exercise_duration: int | None = None
    exercise_intensity: int | None = None
    caffeine_mg: int | None = None
    water_glasses: int | None = None
    ate_breakfast: bool | None = None
    screen_time_before_bed: int | None = None
    deep_work_hours: float | None = None
    productivity_rating: int | None = None
    notes: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


class CheckinStatsResponse(CamelModel):
    days: int
    total_checkins: int
    average_mood: float
    average_energy: float
    average_sleep: float
    average_productivity: float
    streak_days: int


class DailyMetricsResponse(CamelModel):
    date: dt.date
    sleep_hours: float
    sleep_quality: float
    avg_energy: float
    mood: str
    mood_score: int
    stress_level: float
    exercise_duration: float
    productivity_rating: float
    water_glasses: float
    caffeine_mg: float


class PeriodAveragesResponse(CamelModel):
    sleep: float
    energy: float
    productivity: float
    mood: float


class WeeklyTrendResponse(CamelModel):
    period: str
    sleep: float
    energy: float
    productivity: float
    mood: float


class TrendResponse(CamelModel):
    direction: str
    current: float
    previous: float
    delta: float


class AnalyticsResponse(CamelModel):
    days: int
    total_checkins: int
    averages: PeriodAveragesResponse
    daily: list[DailyMetricsResponse]
    weekly_trends: list[WeeklyTrendResponse]
    best_day: dt.date | None
    improvement_area: str | None
    streak_days: int
    trends: dict[str, TrendResponse]
