"""
Wall-clock access for quota calculations.

Daily quotas depend on "today", so every service receives a Clock instead
of calling datetime.now() directly. Tests pin the date with FixedClock.
"""
from datetime import datetime, date, time, timedelta
from typing import Tuple

import pytz

from app.core.config import APP_TIMEZONE


class Clock:
    """
    System clock bound to the server's configured timezone.

    All datetimes handed out are timezone-aware and expressed in UTC so they
    compare consistently with what is stored in the database.
    """

    def __init__(self, timezone: str = APP_TIMEZONE):
        self.tz = pytz.timezone(timezone)

    def now(self) -> datetime:
        return datetime.now(pytz.utc)

    def today(self) -> date:
        """Calendar date in the configured timezone."""
        return self.now().astimezone(self.tz).date()

    def day_bounds(self, day: date | None = None) -> Tuple[datetime, datetime]:
        """
        Return the [start, end) UTC interval covering one local calendar day.

        Uses pytz localize() so days with a DST transition get their real
        length (23 or 25 hours).
        """
        day = day or self.today()
        start = self.tz.localize(datetime.combine(day, time.min))
        end = self.tz.localize(datetime.combine(day + timedelta(days=1), time.min))
        return start.astimezone(pytz.utc), end.astimezone(pytz.utc)


class FixedClock(Clock):
    """Clock frozen at a given instant; advance() moves it forward."""

    def __init__(self, instant: datetime, timezone: str = APP_TIMEZONE):
        super().__init__(timezone)
        if instant.tzinfo is None:
            instant = pytz.utc.localize(instant)
        self.instant = instant.astimezone(pytz.utc)

    def now(self) -> datetime:
        return self.instant

    def advance(self, **kwargs) -> None:
        self.instant = self.instant + timedelta(**kwargs)


_system_clock = Clock()


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock (overridden in tests)."""
    return _system_clock
