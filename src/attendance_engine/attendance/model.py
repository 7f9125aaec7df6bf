from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus, BreakStatus, SessionState


@dataclass(frozen=True)
class Location:
    lat: Optional[Decimal] = None
    lng: Optional[Decimal] = None
    address: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.lat is None and self.lng is None and not self.address


@dataclass(frozen=True)
class AttendanceRecord:
    """One row per (user, work date).

    ``state`` is derived from the punch columns when the record is built and
    is never stored.
    """

    attendance_id: Optional[int]
    user_id: int
    work_date: date
    punch_in: Optional[datetime] = None
    punch_out: Optional[datetime] = None
    total_hours: Optional[Decimal] = None
    break_minutes: int = 0
    production_hours: Optional[Decimal] = None
    status: AttendanceStatus = AttendanceStatus.PENDING
    is_admin_override: bool = False
    override_reason: Optional[str] = None
    overridden_by: Optional[int] = None
    is_auto_punch_in: bool = False
    is_auto_punch_out: bool = False
    punch_in_location: Optional[Location] = None
    punch_out_location: Optional[Location] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    state: SessionState = field(init=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "state", SessionState.from_punches(self.punch_in, self.punch_out))


@dataclass(frozen=True)
class BreakRecord:
    break_id: int
    attendance_id: int
    user_id: int
    start: datetime
    end: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    status: BreakStatus = BreakStatus.ACTIVE
    reason: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class DaySnapshot:
    """Read model for the "today" screen."""

    user_id: int
    work_date: date
    state: SessionState
    record: Optional[AttendanceRecord]
    active_break: Optional[BreakRecord]


@dataclass(frozen=True)
class MonthlySummary:
    """Status counts for one user over a calendar month.

    ``present_percentage`` weighs a half day as half a present day and is
    rounded to a whole percent.
    """

    user_id: int
    start_date: date
    end_date: date
    present: int
    half_day: int
    absent: int
    week_off: int
    holiday: int
    pending: int
    total_days: int
    present_percentage: int
