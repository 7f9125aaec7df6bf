"""Hour arithmetic and status derivation.

Everything here is pure apart from ``StatusClassifier``, which adds the
calendar lookup. Hours are ``Decimal`` rounded half-up to two places.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..calendars.model import AttendanceSettings, DayClassification
from ..calendars.service import CalendarResolver
from ..core.enums import AttendanceStatus
from .factory import StatusStrategyFactory

TWO_PLACES = Decimal("0.01")


def round_hours(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def compute_total_hours(punch_in: Optional[datetime], punch_out: Optional[datetime]) -> Optional[Decimal]:
    if punch_in is None or punch_out is None:
        return None
    seconds = Decimal(int((punch_out - punch_in).total_seconds()))
    return round_hours(seconds / Decimal(3600))


def compute_break_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes, half-up; a clock going backwards yields 0."""
    seconds = Decimal(int((end - start).total_seconds()))
    minutes = (seconds / Decimal(60)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(0, int(minutes))


def compute_production_hours(total_hours: Optional[Decimal], break_minutes: int) -> Optional[Decimal]:
    if total_hours is None:
        return None
    production = total_hours - Decimal(int(break_minutes or 0)) / Decimal(60)
    return round_hours(max(Decimal("0"), production))


_FACTORY = StatusStrategyFactory()


def classify_status(
    total_hours: Optional[Decimal],
    day: DayClassification,
    settings: AttendanceSettings,
    *,
    factory: StatusStrategyFactory = _FACTORY,
) -> AttendanceStatus:
    strategy = factory.for_day(day)
    return strategy.decide(total_hours=total_hours, day=day, settings=settings).status


class StatusClassifier:
    def __init__(self, calendar: CalendarResolver, *, factory: Optional[StatusStrategyFactory] = None):
        self._calendar = calendar
        self._factory = factory or StatusStrategyFactory()

    def classify(self, total_hours: Optional[Decimal], work_date: date, settings: AttendanceSettings) -> AttendanceStatus:
        day = self._calendar.classify(work_date, settings)
        return classify_status(total_hours, day, settings, factory=self._factory)

    def day(self, work_date: date, settings: AttendanceSettings) -> DayClassification:
        return self._calendar.classify(work_date, settings)
