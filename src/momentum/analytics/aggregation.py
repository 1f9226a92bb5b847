"""
Check-in analytics.

Pure functions over check-in-like objects (ORM rows or anything exposing the
same snake_case attributes). Nothing here touches the database or the clock;
callers pass `today` explicitly.

Missing numeric metrics count as 0 throughout, including inside the energy
average. That penalizes partially filled check-ins, and is kept so the numbers
match what existing clients already display.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Literal

MOOD_SCORES: dict[str, int] = {
    "terrible": 1,
    "bad": 2,
    "okay": 3,
    "good": 4,
    "great": 5,
    "amazing": 6,
}
DEFAULT_MOOD = "okay"
NEUTRAL_MOOD_SCORE = 3

WEEK_SIZE = 7
TREND_WINDOW = 7
ALL_GOOD = "All metrics look good!"

# Thresholds below which a period average is flagged, in priority order.
IMPROVEMENT_THRESHOLDS: tuple[tuple[str, str, float], ...] = (
    ("Sleep", "sleep", 7),
    ("Energy", "energy", 6),
    ("Productivity", "productivity", 6),
    ("Mood", "mood", 4),
)

# Daily metric attribute per trend key.
TREND_METRICS: dict[str, str] = {
    "sleepHours": "sleep_hours",
    "sleepQuality": "sleep_quality",
    "energy": "avg_energy",
    "productivityRating": "productivity_rating",
    "stressLevel": "stress_level",
}

TrendDirection = Literal["up", "down", "stable"]


def round1(value: float) -> float:
    """Round to one decimal place, halves away from zero."""
    return float(Decimal(repr(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _num(value: Any) -> float:  # noqa: ANN401
    return float(value) if value is not None else 0.0


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DailyMetrics:
    date: date
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


@dataclass(frozen=True)
class PeriodAverages:
    sleep: float = 0.0
    energy: float = 0.0
    productivity: float = 0.0
    mood: float = 0.0


@dataclass(frozen=True)
class WeeklyTrend:
    period: str
    sleep: float
    energy: float
    productivity: float
    mood: float


@dataclass(frozen=True)
class Trend:
    direction: TrendDirection
    current: float
    previous: float
    delta: float


@dataclass(frozen=True)
class AnalyticsSummary:
    total_checkins: int
    averages: PeriodAverages
    daily: list[DailyMetrics]
    weekly_trends: list[WeeklyTrend]
    best_day: date | None
    improvement_area: str | None
    streak_days: int
    trends: dict[str, Trend] = field(default_factory=dict)


@dataclass(frozen=True)
class CheckinStats:
    total_checkins: int
    average_mood: float
    average_energy: float
    average_sleep: float
    average_productivity: float
    streak_days: int


# ---------------------------------------------------------------------------
# Per-record values
# ---------------------------------------------------------------------------


def energy_average(record: Any) -> float:  # noqa: ANN401
    """Mean of morning, afternoon and evening energy; a missing rating counts as 0."""
    total = _num(record.energy_morning) + _num(record.energy_afternoon) + _num(record.energy_evening)
    return round1(total / 3)


def mood_score(label: str | None) -> int:
    """Map a mood label to 1..6. Missing means 'okay'; unknown labels score 3."""
    key = (label or DEFAULT_MOOD).strip().lower()
    return MOOD_SCORES.get(key, NEUTRAL_MOOD_SCORE)


def daily_metrics(records: Iterable[Any]) -> list[DailyMetrics]:
    """Derived per-day values in chronological order, whatever the input order."""
    ordered = sorted(records, key=lambda r: r.date)
    return [
        DailyMetrics(
            date=r.date,
            sleep_hours=_num(r.sleep_hours),
            sleep_quality=_num(r.sleep_quality),
            avg_energy=energy_average(r),
            mood=r.mood or DEFAULT_MOOD,
            mood_score=mood_score(r.mood),
            stress_level=_num(r.stress_level),
            exercise_duration=_num(r.exercise_duration),
            productivity_rating=_num(r.productivity_rating),
            water_glasses=_num(r.water_glasses),
            caffeine_mg=_num(r.caffeine_mg),
        )
        for r in ordered
    ]


# ---------------------------------------------------------------------------
# Period aggregates
# ---------------------------------------------------------------------------


def period_averages(daily: Sequence[DailyMetrics], *, rounded: bool = True) -> PeriodAverages:
    """Mean sleep hours, energy, productivity and mood score. All zero for no data."""
    if not daily:
        return PeriodAverages()
    averages = PeriodAverages(
        sleep=_mean([d.sleep_hours for d in daily]),
        energy=_mean([d.avg_energy for d in daily]),
        productivity=_mean([d.productivity_rating for d in daily]),
        mood=_mean([d.mood_score for d in daily]),
    )
    if not rounded:
        return averages
    return PeriodAverages(
        sleep=round1(averages.sleep),
        energy=round1(averages.energy),
        productivity=round1(averages.productivity),
        mood=round1(averages.mood),
    )


def weekly_trends(daily: Sequence[DailyMetrics]) -> list[WeeklyTrend]:
    """
    Averages over consecutive windows of seven records.

    Windows count records, not calendar weeks: a gap in check-ins does not
    start a new window. The last window may hold fewer than seven records.
    """
    trends: list[WeeklyTrend] = []
    for index, start in enumerate(range(0, len(daily), WEEK_SIZE), start=1):
        window = daily[start : start + WEEK_SIZE]
        averages = period_averages(window)
        trends.append(
            WeeklyTrend(
                period=f"Week {index}",
                sleep=averages.sleep,
                energy=averages.energy,
                productivity=averages.productivity,
                mood=averages.mood,
            )
        )
    return trends


def best_day(daily: Sequence[DailyMetrics]) -> date | None:
    """Date with the strictly highest mean of sleep quality, energy, productivity and mood score.

    Ties keep the earliest date. None when nothing scores above zero.
    """
    best: date | None = None
    best_score = 0.0
    for d in daily:
        score = (d.sleep_quality + d.avg_energy + d.productivity_rating + d.mood_score) / 4
        if score > best_score:
            best_score = score
            best = d.date
    return best


def improvement_area(averages: PeriodAverages) -> str:
    """First metric whose average falls below its threshold."""
    for label, attr, threshold in IMPROVEMENT_THRESHOLDS:
        if getattr(averages, attr) < threshold:
            return label
    return ALL_GOOD


def trend_direction(values: Sequence[float]) -> Trend:
    """Compare the last two of the most recent seven values."""
    window = [round1(v) for v in values[-TREND_WINDOW:]]
    current = window[-1] if window else 0.0
    previous = window[-2] if len(window) > 1 else current
    direction: TrendDirection
    if current > previous:
        direction = "up"
    elif current < previous:
        direction = "down"
    else:
        direction = "stable"
    return Trend(direction=direction, current=current, previous=previous, delta=round1(current - previous))


def streak_days(dates: Iterable[date], today: date) -> int:
    """
    Consecutive calendar days with a check-in, counting back from today.

    A streak that ended yesterday still counts while today has no check-in yet.
    """
    seen = set(dates)
    day = today if today in seen else today - timedelta(days=1)
    streak = 0
    while day in seen:
        streak += 1
        day -= timedelta(days=1)
    return streak


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------


def summarize(records: Iterable[Any], today: date) -> AnalyticsSummary:
    """Full analytics for a set of check-ins."""
    daily = daily_metrics(records)
    if not daily:
        return AnalyticsSummary(
            total_checkins=0,
            averages=PeriodAverages(),
            daily=[],
            weekly_trends=[],
            best_day=None,
            improvement_area=None,
            streak_days=0,
        )

    return AnalyticsSummary(
        total_checkins=len(daily),
        averages=period_averages(daily),
        daily=daily,
        weekly_trends=weekly_trends(daily),
        best_day=best_day(daily),
        improvement_area=improvement_area(period_averages(daily, rounded=False)),
        streak_days=streak_days((d.date for d in daily), today),
        trends={key: trend_direction([getattr(d, attr) for d in daily]) for key, attr in TREND_METRICS.items()},
    )


def checkin_stats(records: Iterable[Any], today: date) -> CheckinStats:
    """Headline numbers for the dashboard."""
    daily = daily_metrics(records)
    averages = period_averages(daily)
    return CheckinStats(
        total_checkins=len(daily),
        average_mood=averages.mood,
        average_energy=averages.energy,
        average_sleep=averages.sleep,
        average_productivity=averages.productivity,
        streak_days=streak_days((d.date for d in daily), today),
    )
