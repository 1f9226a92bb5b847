"""Wall clock used by services for timestamps and the server-local calendar date."""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from momentum.config import get_settings


class Clock:
    """Current instant in UTC and current date in the configured time zone."""

    def __init__(self, tz_name: str = "UTC") -> None:
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        """Calendar date in the server time zone (no time-of-day component)."""
        return datetime.now(self.tz).date()


class FixedClock(Clock):
    """Clock frozen at a given instant. Used by tests and scripts."""

    def __init__(self, instant: datetime, tz_name: str = "UTC") -> None:
        super().__init__(tz_name)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def today(self) -> date:
        return self.instant.astimezone(self.tz).date()


def get_clock() -> Clock:
    """Build the request clock from settings (FastAPI dependency)."""
    return Clock(get_settings().timezone)
