from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ...calendars.model import AttendanceSettings, DayClassification
from ...core.enums import AttendanceStatus
from .base import StatusDecision, StatusStrategy


class WorkedHoursStrategy(StatusStrategy):
    """Working day: compare total hours against the configured thresholds."""

    def decide(self, *, total_hours: Optional[Decimal], day: DayClassification, settings: AttendanceSettings) -> StatusDecision:
        hours = total_hours if total_hours is not None else Decimal("0")
        if hours >= settings.full_day_hours:
            return StatusDecision(status=AttendanceStatus.PRESENT)
        if hours >= settings.half_day_hours:
            return StatusDecision(status=AttendanceStatus.HALF_DAY)
        if hours > 0:
            return StatusDecision(status=AttendanceStatus.ABSENT)
        return StatusDecision(status=AttendanceStatus.PENDING)
