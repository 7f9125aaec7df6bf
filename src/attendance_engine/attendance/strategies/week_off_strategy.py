from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ...calendars.model import AttendanceSettings, DayClassification
from ...core.enums import AttendanceStatus
from .base import StatusDecision, StatusStrategy


class WeekOffStrategy(StatusStrategy):
    """Configured weekend day; worked hours do not change the status."""

    def decide(self, *, total_hours: Optional[Decimal], day: DayClassification, settings: AttendanceSettings) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.WEEK_OFF)
