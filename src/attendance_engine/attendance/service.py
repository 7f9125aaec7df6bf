from __future__ import annotations

import calendar
import logging
from collections import Counter
from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ..calendars.service import SettingsResolver
from ..common.clock import OrgClock
from ..common.validators import optional_text
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, BreakStatus, SessionState
from ..core.exceptions import (
    AlreadyActiveSession,
    BreakAlreadyActive,
    DayAlreadyClosed,
    NoActiveBreak,
    NoActiveSession,
    NotFoundError,
    NotPunchedIn,
    ValidationError,
)
from ..database.locking import UserLock
from .break_repository import BreakRepository
from .classifier import (
    StatusClassifier,
    compute_break_minutes,
    compute_production_hours,
    compute_total_hours,
)
from .model import AttendanceRecord, BreakRecord, DaySnapshot, Location, MonthlySummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Per-user punch/break state machine.

    Every transition takes the user lock and re-reads state under it, so a
    retried or concurrent call sees what the first one wrote.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        breaks: BreakRepository,
        settings: SettingsResolver,
        classifier: StatusClassifier,
        lock: UserLock,
        *,
        clock: Optional[OrgClock] = None,
    ):
        self._attendance = attendance
        self._breaks = breaks
        self._settings = settings
        self._classifier = classifier
        self._lock = lock
        self._clock = clock or OrgClock()

    def punch_in(
        self,
        user_id: int,
        *,
        location: Optional[Location] = None,
        now: Optional[datetime] = None,
        auto: bool = False,
    ) -> AttendanceRecord:
        now = now or self._clock.now()
        work_date = now.date()

        with self._lock.hold(user_id):
            open_record = self._attendance.get_open_for_user(user_id)
            if open_record:
                raise AlreadyActiveSession(current_state=open_record.state)

            existing = self._attendance.get_for_user_and_date(user_id, work_date)
            if existing and existing.state == SessionState.CLOSED:
                raise DayAlreadyClosed(current_state=existing.state)

            self._close_lingering_break(user_id, end=now)

            if existing:
                record = replace(
                    existing,
                    punch_in=now,
                    punch_out=None,
                    total_hours=None,
                    break_minutes=0,
                    production_hours=None,
                    status=AttendanceStatus.PENDING,
                    is_auto_punch_in=auto,
                    is_auto_punch_out=False,
                    punch_in_location=location,
                )
                self._attendance.update(record)
            else:
                record = AttendanceRecord(
                    attendance_id=None,
                    user_id=int(user_id),
                    work_date=work_date,
                    punch_in=now,
                    status=AttendanceStatus.PENDING,
                    is_auto_punch_in=auto,
                    punch_in_location=location,
                )
                record = replace(record, attendance_id=self._attendance.create(record))

        logger.info("User %s punched in at %s%s", user_id, now, " (auto)" if auto else "")
        return record

    def punch_out(
        self,
        user_id: int,
        *,
        location: Optional[Location] = None,
        now: Optional[datetime] = None,
        auto: bool = False,
    ) -> AttendanceRecord:
        now = now or self._clock.now()

        with self._lock.hold(user_id):
            record = self._attendance.get_open_for_user(user_id)
            if not record:
                today = self._attendance.get_for_user_and_date(user_id, now.date())
                raise NoActiveSession(current_state=today.state if today else SessionState.NONE)

            punch_out = max(now, record.punch_in)
            active = self._breaks.get_active_for_user(user_id)
            if active:
                # The session cannot end before the break it is still on.
                punch_out = max(punch_out, active.start)
            self._close_lingering_break(user_id, end=punch_out)
            record = self._closed(record, punch_out=punch_out)
            record = replace(record, is_auto_punch_out=auto, punch_out_location=location)
            self._attendance.update(record)

        logger.info(
            "User %s punched out at %s: %s h, status %s%s",
            user_id,
            record.punch_out,
            record.total_hours,
            record.status.value,
            " (auto)" if auto else "",
        )
        return record

    def start_break(self, user_id: int, *, reason: Optional[str] = None, now: Optional[datetime] = None) -> BreakRecord:
        now = now or self._clock.now()

        with self._lock.hold(user_id):
            record = self._attendance.get_open_for_user(user_id)
            if not record:
                raise NotPunchedIn(current_state=SessionState.NONE)
            active = self._breaks.get_active_for_user(user_id)
            if active:
                raise BreakAlreadyActive(current_state=active.status)

            break_id = self._breaks.create(
                attendance_id=int(record.attendance_id),
                user_id=int(user_id),
                start=now,
                reason=optional_text(reason),
            )

        logger.info("User %s started break %s", user_id, break_id)
        return BreakRecord(
            break_id=break_id,
            attendance_id=int(record.attendance_id),
            user_id=int(user_id),
            start=now,
            reason=optional_text(reason),
        )

    def end_break(self, user_id: int, *, note: Optional[str] = None, now: Optional[datetime] = None) -> BreakRecord:
        now = now or self._clock.now()

        with self._lock.hold(user_id):
            active = self._breaks.get_active_for_user(user_id)
            if not active:
                raise NoActiveBreak()
            closed = self._complete_break(active, end=now, note=optional_text(note))

            record = self._attendance.get_by_id(active.attendance_id)
            if record:
                minutes = self._breaks.total_minutes_for_record(active.attendance_id, since=record.punch_in)
                self._attendance.update(replace(record, break_minutes=minutes))

        logger.info("User %s ended break %s after %s min", user_id, closed.break_id, closed.duration_minutes)
        return closed

    def get_today(self, user_id: int, *, today: Optional[date] = None) -> DaySnapshot:
        today = today or self._clock.today()
        record = self._attendance.get_open_for_user(user_id) or self._attendance.get_for_user_and_date(user_id, today)
        return DaySnapshot(
            user_id=int(user_id),
            work_date=record.work_date if record else today,
            state=record.state if record else SessionState.NONE,
            record=record,
            active_break=self._breaks.get_active_for_user(user_id),
        )

    def get_day(self, user_id: int, work_date: date) -> AttendanceRecord:
        record = self._attendance.get_for_user_and_date(user_id, work_date)
        if not record:
            raise NotFoundError("No attendance record for this date")
        return record

    def list_range(
        self,
        user_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        end = end or self._clock.today()
        start = start or end - timedelta(days=DEFAULT_HISTORY_LIMIT - 1)
        if end < start:
            raise ValidationError("End date must be on or after start date")
        return self._attendance.list_for_user(user_id, start=start, end=end)

    def list_breaks(self, user_id: int, work_date: date) -> Sequence[BreakRecord]:
        record = self._attendance.get_for_user_and_date(user_id, work_date)
        if not record:
            return []
        return self._breaks.list_for_record(int(record.attendance_id))

    def break_minutes_on(self, user_id: int, work_date: date) -> int:
        """Completed break minutes in the user's session for ``work_date``."""
        record = self._attendance.get_for_user_and_date(user_id, work_date)
        if not record or record.attendance_id is None or record.punch_in is None:
            return 0
        return self._breaks.total_minutes_for_record(int(record.attendance_id), since=record.punch_in)

    def monthly_summary(self, user_id: int, year: int, month: int) -> MonthlySummary:
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12")
        start = date(int(year), int(month), 1)
        end = date(int(year), int(month), calendar.monthrange(int(year), int(month))[1])

        counts = Counter(r.status for r in self._attendance.list_for_user(user_id, start=start, end=end))
        total_days = sum(counts.values())
        percentage = 0
        if total_days:
            attended = counts[AttendanceStatus.PRESENT] + Decimal("0.5") * counts[AttendanceStatus.HALF_DAY]
            percentage = int((attended * 100 / total_days).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return MonthlySummary(
            user_id=int(user_id),
            start_date=start,
            end_date=end,
            present=counts[AttendanceStatus.PRESENT],
            half_day=counts[AttendanceStatus.HALF_DAY],
            absent=counts[AttendanceStatus.ABSENT],
            week_off=counts[AttendanceStatus.WEEK_OFF],
            holiday=counts[AttendanceStatus.HOLIDAY],
            pending=counts[AttendanceStatus.PENDING],
            total_days=total_days,
            present_percentage=percentage,
        )

    def recompute(self, record: AttendanceRecord) -> AttendanceRecord:
        """Re-derive hours and status from the punches and the session's breaks.

        A record that is not closed has no hours and stays pending.
        """
        minutes = 0
        if record.attendance_id is not None and record.punch_in is not None:
            minutes = self._breaks.total_minutes_for_record(int(record.attendance_id), since=record.punch_in)
        total = compute_total_hours(record.punch_in, record.punch_out)
        if total is None:
            status = AttendanceStatus.PENDING
        else:
            status = self._classifier.classify(total, record.work_date, self._settings.resolve())
        return replace(
            record,
            total_hours=total,
            break_minutes=minutes,
            production_hours=compute_production_hours(total, minutes),
            status=status,
        )

    def close_record_breaks(self, attendance_id: int, *, end: datetime) -> None:
        for b in self._breaks.list_for_record(attendance_id):
            if b.end is None:
                self._complete_break(b, end=max(end, b.start), note=None)

    def _closed(self, record: AttendanceRecord, *, punch_out: datetime) -> AttendanceRecord:
        return self.recompute(replace(record, punch_out=punch_out))

    def _close_lingering_break(self, user_id: int, *, end: datetime) -> None:
        active = self._breaks.get_active_for_user(user_id)
        if active:
            closed = self._complete_break(active, end=max(end, active.start), note=None)
            logger.info("Force-closed break %s for user %s (%s min)", closed.break_id, user_id, closed.duration_minutes)

    def _complete_break(self, active: BreakRecord, *, end: datetime, note: Optional[str]) -> BreakRecord:
        minutes = compute_break_minutes(active.start, end)
        self._breaks.complete(break_id=active.break_id, end=end, duration_minutes=minutes, note=note)
        return replace(
            active,
            end=end,
            duration_minutes=minutes,
            status=BreakStatus.COMPLETED,
            note=note or active.note,
        )
