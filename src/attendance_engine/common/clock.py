from __future__ import annotations

from datetime import date, datetime, time

import pytz

from ..core.constants import DEFAULT_TIMEZONE


class OrgClock:
    """Resolves "now" in the organization's time zone.

    Timestamps are handed out as naive wall-clock values in that zone and are
    persisted the same way, so the caller's locale never leaks into punch
    times.
    """

    def __init__(self, tz_name: str = DEFAULT_TIMEZONE):
        self._tz = pytz.timezone(tz_name)

    @property
    def tz(self):
        return self._tz

    @property
    def zone(self) -> str:
        return self._tz.zone

    def now(self) -> datetime:
        return datetime.now(self._tz).replace(tzinfo=None, microsecond=0)

    def today(self) -> date:
        return self.now().date()

    @staticmethod
    def at(day: date, at_time: time) -> datetime:
        return datetime.combine(day, at_time)
