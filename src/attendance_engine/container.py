from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Optional

from .attendance.classifier import StatusClassifier
from .attendance.factory import StatusStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.mysql_break_repository import MySQLBreakRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .calendars.mysql_calendar_repository import MySQLHolidayRepository, MySQLSettingsRepository
from .calendars.service import CalendarResolver, HolidayService, SettingsResolver, SettingsService
from .common.clock import OrgClock
from .core.constants import DEFAULT_TIMEZONE
from .corrections.mysql_correction_repository import MySQLCorrectionRepository
from .corrections.service import CorrectionService
from .database.bootstrap import to_db_config
from .database.connection import DatabaseConnection
from .database.locking import MySQLUserLock
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .leave.accrual import LeaveAccrualJob
from .leave.mysql_leave_accrual_repository import MySQLLeaveAccrualRepository
from .leave.mysql_leave_balance_repository import MySQLLeaveBalanceRepository
from .leave.mysql_leave_policy_repository import MySQLLeavePolicyRepository
from .leave.mysql_leave_request_repository import MySQLLeaveRequestRepository
from .leave.policy_engine import LeavePolicyEngine
from .leave.service import LeaveService
from .notifications.dispatcher import LoggingNotifier, NotificationDispatcher, Notifier
from .scheduler.jobs import AttendanceJobs


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    clock: OrgClock

    settings_service: SettingsService
    holiday_service: HolidayService
    attendance_service: AttendanceService
    correction_service: CorrectionService
    leave_service: LeaveService
    attendance_jobs: AttendanceJobs
    leave_accrual_job: LeaveAccrualJob


def build_container(
    *,
    db_config: dict,
    org_timezone: str = DEFAULT_TIMEZONE,
    notifier: Optional[Notifier] = None,
    executor: Optional[Executor] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(to_db_config(db_config))
    clock = OrgClock(org_timezone)
    lock = MySQLUserLock(conn)

    settings_repo = MySQLSettingsRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    breaks_repo = MySQLBreakRepository(conn)
    corrections_repo = MySQLCorrectionRepository(conn)
    audit_repo = MySQLAuditRepository(conn)
    employees_repo = MySQLEmployeeRepository(conn)
    policies_repo = MySQLLeavePolicyRepository(conn)
    balances_repo = MySQLLeaveBalanceRepository(conn)
    leave_requests_repo = MySQLLeaveRequestRepository(conn)
    accruals_repo = MySQLLeaveAccrualRepository(conn)

    settings_resolver = SettingsResolver(settings_repo)
    calendar = CalendarResolver(holidays_repo)
    classifier = StatusClassifier(calendar, factory=StatusStrategyFactory())
    dispatcher = NotificationDispatcher(notifier or LoggingNotifier(), executor)

    attendance_service = AttendanceService(
        attendance_repo,
        breaks_repo,
        settings_resolver,
        classifier,
        lock,
        clock=clock,
    )
    correction_service = CorrectionService(
        corrections_repo,
        attendance_repo,
        attendance_service,
        audit_repo,
        lock,
        clock=clock,
    )
    leave_policy_engine = LeavePolicyEngine(policies_repo, balances_repo, leave_requests_repo, clock=clock)
    leave_service = LeaveService(
        policies_repo,
        balances_repo,
        leave_requests_repo,
        audit_repo,
        employees_repo,
        leave_policy_engine,
        lock,
        clock=clock,
    )
    attendance_jobs = AttendanceJobs(
        attendance_repo,
        attendance_service,
        settings_resolver,
        classifier,
        leave_requests_repo,
        employees_repo,
        lock,
        dispatcher,
        clock=clock,
    )
    leave_accrual_job = LeaveAccrualJob(
        employees_repo,
        policies_repo,
        balances_repo,
        accruals_repo,
        audit_repo,
        lock,
        clock=clock,
    )

    return Container(
        conn=conn,
        clock=clock,
        settings_service=SettingsService(settings_repo, settings_resolver),
        holiday_service=HolidayService(holidays_repo),
        attendance_service=attendance_service,
        correction_service=correction_service,
        leave_service=leave_service,
        attendance_jobs=attendance_jobs,
        leave_accrual_job=leave_accrual_job,
    )
