"""Scheduler-triggered attendance transitions.

Each entry point is a plain method: the APScheduler wiring in ``runner`` only
decides *when* they run, and admin tooling or tests can call them directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from ..attendance.classifier import StatusClassifier
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..calendars.model import AttendanceSettings
from ..calendars.service import SettingsResolver
from ..common.clock import OrgClock
from ..common.sweep import SweepResult
from ..core.constants import MAX_DAILY_BREAK_MINUTES
from ..core.enums import NotificationKind, SessionState
from ..database.locking import UserLock
from ..employees.repository import EmployeeRepository
from ..leave.repository import LeaveRequestRepository
from ..notifications.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

SKIP_WEEK_OFF = "week_off"
SKIP_HOLIDAY = "holiday"
SKIP_ON_LEAVE = "on_leave"
SKIP_ALREADY_PUNCHED_IN = "already_punched_in"
SKIP_OPEN_SESSION = "open_session"
SKIP_NOT_PUNCHED_IN = "not_punched_in"
SKIP_ALREADY_CLOSED = "already_closed"


@dataclass(frozen=True)
class AutoPunchOutcome:
    user_id: int
    work_date: date
    performed: bool
    skipped_reason: Optional[str] = None
    record: Optional[AttendanceRecord] = None


@dataclass(frozen=True)
class BreakUsage:
    user_id: int
    work_date: date
    break_minutes: int
    exceeded: bool

    @property
    def break_hours(self) -> Decimal:
        return (Decimal(self.break_minutes) / 60).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


class AttendanceJobs:
    def __init__(
        self,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
        settings: SettingsResolver,
        classifier: StatusClassifier,
        leave_requests: LeaveRequestRepository,
        employees: EmployeeRepository,
        lock: UserLock,
        dispatcher: NotificationDispatcher,
        *,
        clock: Optional[OrgClock] = None,
        max_break_minutes: int = MAX_DAILY_BREAK_MINUTES,
    ):
        self._attendance = attendance
        self._attendance_service = attendance_service
        self._settings = settings
        self._classifier = classifier
        self._leave_requests = leave_requests
        self._employees = employees
        self._lock = lock
        self._dispatcher = dispatcher
        self._clock = clock or OrgClock()
        self._max_break_minutes = int(max_break_minutes)

    def auto_punch_in(self, user_id: int, work_date: Optional[date] = None) -> AutoPunchOutcome:
        work_date = work_date or self._clock.today()
        settings = self._settings.resolve()

        with self._lock.hold(user_id):
            skip = self._non_working_reason(user_id, work_date, settings)
            if not skip:
                existing = self._attendance.get_for_user_and_date(user_id, work_date)
                if existing and existing.punch_in is not None:
                    skip = SKIP_ALREADY_PUNCHED_IN
                elif self._attendance.get_open_for_user(user_id):
                    skip = SKIP_OPEN_SESSION
            if skip:
                return self._skipped(user_id, work_date, skip, "punch-in")

            record = self._attendance_service.punch_in(
                user_id,
                now=self._clock.at(work_date, settings.standard_start),
                auto=True,
            )

        self._dispatcher.emit(user_id, NotificationKind.AUTO_PUNCH_IN, work_date=work_date, punch_in=record.punch_in)
        return AutoPunchOutcome(user_id=int(user_id), work_date=work_date, performed=True, record=record)

    def auto_punch_out(self, user_id: int, work_date: Optional[date] = None) -> AutoPunchOutcome:
        work_date = work_date or self._clock.today()
        settings = self._settings.resolve()

        with self._lock.hold(user_id):
            existing = self._attendance.get_for_user_and_date(user_id, work_date)
            if not existing or existing.state == SessionState.NONE:
                skip = SKIP_NOT_PUNCHED_IN
            elif existing.state == SessionState.CLOSED:
                skip = SKIP_ALREADY_CLOSED
            else:
                skip = self._non_working_reason(user_id, work_date, settings)
            if skip:
                return self._skipped(user_id, work_date, skip, "punch-out")

            end = max(self._clock.at(work_date, settings.standard_end), existing.punch_in)
            record = self._attendance_service.punch_out(user_id, now=end, auto=True)

        self._dispatcher.emit(
            user_id,
            NotificationKind.AUTO_PUNCH_OUT,
            work_date=work_date,
            punch_out=record.punch_out,
            total_hours=record.total_hours,
        )
        return AutoPunchOutcome(user_id=int(user_id), work_date=work_date, performed=True, record=record)

    def check_break_usage(self, user_id: int, work_date: Optional[date] = None) -> BreakUsage:
        """Warn the user when completed breaks for the day exceed the daily allowance."""
        work_date = work_date or self._clock.today()
        minutes = self._attendance_service.break_minutes_on(user_id, work_date)
        usage = BreakUsage(
            user_id=int(user_id),
            work_date=work_date,
            break_minutes=minutes,
            exceeded=minutes > self._max_break_minutes,
        )
        if usage.exceeded:
            logger.info("User %s took %s min of breaks on %s", user_id, minutes, work_date)
            self._dispatcher.emit(
                user_id,
                NotificationKind.EXCESSIVE_BREAK,
                work_date=work_date,
                break_minutes=minutes,
                break_hours=usage.break_hours,
                limit_minutes=self._max_break_minutes,
            )
        return usage

    def run_auto_punch_in(self, work_date: Optional[date] = None, *, cancel_event=None) -> SweepResult:
        return self._sweep(
            lambda user_id, day: self.auto_punch_in(user_id, day).performed,
            work_date or self._clock.today(),
            "auto punch-in",
            cancel_event,
        )

    def run_auto_punch_out(self, work_date: Optional[date] = None, *, cancel_event=None) -> SweepResult:
        return self._sweep(
            lambda user_id, day: self.auto_punch_out(user_id, day).performed,
            work_date or self._clock.today(),
            "auto punch-out",
            cancel_event,
        )

    def run_break_monitoring(self, work_date: Optional[date] = None, *, cancel_event=None) -> SweepResult:
        """Check every active employee; ``succeeded`` counts the warnings sent."""
        return self._sweep(
            lambda user_id, day: self.check_break_usage(user_id, day).exceeded,
            work_date or self._clock.today(),
            "break monitoring",
            cancel_event,
        )

    def _sweep(
        self,
        action: Callable[[int, date], bool],
        work_date: date,
        label: str,
        cancel_event,
    ) -> SweepResult:
        result = SweepResult()
        for user_id in self._employees.list_active_ids():
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("%s sweep for %s cancelled after %s employees", label, work_date, result.processed)
                result.cancelled = True
                break
            result.processed += 1
            try:
                performed = action(user_id, work_date)
            except Exception as e:
                logger.error("%s failed for user %s on %s", label, user_id, work_date, exc_info=True)
                result.record_failure(user_id, e)
                continue
            if performed:
                result.succeeded += 1
            else:
                result.skipped += 1

        logger.info(
            "%s sweep for %s: %s done, %s skipped, %s failed",
            label,
            work_date,
            result.succeeded,
            result.skipped,
            result.failed,
        )
        return result

    def _non_working_reason(self, user_id: int, work_date: date, settings: AttendanceSettings) -> Optional[str]:
        day = self._classifier.day(work_date, settings)
        if day.is_weekend:
            return SKIP_WEEK_OFF
        if day.is_holiday:
            return SKIP_HOLIDAY
        if self._leave_requests.has_overlapping_approved(user_id, work_date, work_date):
            return SKIP_ON_LEAVE
        return None

    @staticmethod
    def _skipped(user_id: int, work_date: date, reason: str, label: str) -> AutoPunchOutcome:
        logger.debug("Auto %s skipped for user %s on %s: %s", label, user_id, work_date, reason)
        return AutoPunchOutcome(user_id=int(user_id), work_date=work_date, performed=False, skipped_reason=reason)
