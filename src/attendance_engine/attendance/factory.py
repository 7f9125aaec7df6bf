from __future__ import annotations

from dataclasses import dataclass

from ..calendars.model import DayClassification
from .strategies.base import StatusStrategy
from .strategies.holiday_strategy import HolidayStrategy
from .strategies.week_off_strategy import WeekOffStrategy
from .strategies.worked_hours_strategy import WorkedHoursStrategy


@dataclass
class StatusStrategyFactory:
    """Factory Pattern: week-off wins over holiday, holiday over worked hours."""

    def for_day(self, day: DayClassification) -> StatusStrategy:
        if day.is_weekend:
            return WeekOffStrategy()
        if day.is_holiday:
            return HolidayStrategy()
        return WorkedHoursStrategy()
