from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import FrozenSet, Optional

from ..core.constants import (
    DEFAULT_FULL_DAY_HOURS,
    DEFAULT_HALF_DAY_HOURS,
    DEFAULT_STANDARD_END,
    DEFAULT_STANDARD_START,
    DEFAULT_WEEKEND_DAYS,
)


@dataclass(frozen=True)
class AttendanceSettings:
    """Configuration value object, resolved once per operation."""

    full_day_hours: Decimal = DEFAULT_FULL_DAY_HOURS
    half_day_hours: Decimal = DEFAULT_HALF_DAY_HOURS
    weekend_days: FrozenSet[str] = field(default_factory=lambda: DEFAULT_WEEKEND_DAYS)
    standard_start: time = DEFAULT_STANDARD_START
    standard_end: time = DEFAULT_STANDARD_END


@dataclass(frozen=True)
class DayClassification:
    work_date: date
    is_weekend: bool = False
    is_holiday: bool = False
    holiday_name: Optional[str] = None

    @property
    def is_working_day(self) -> bool:
        return not (self.is_weekend or self.is_holiday)


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    holiday_date: date
    name: str
    holiday_type: str = "company"
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
