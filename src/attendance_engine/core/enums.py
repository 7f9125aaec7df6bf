from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role supplied by the identity collaborator."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Daily attendance status stored on attendance_records."""

    PRESENT = "present"
    HALF_DAY = "half-day"
    ABSENT = "absent"
    PENDING = "pending"
    WEEK_OFF = "week-off"
    HOLIDAY = "holiday"


class SessionState(str, Enum):
    """Punch session state, derived once from the nullable punch columns."""

    NONE = "none"
    OPEN = "open"
    CLOSED = "closed"

    @classmethod
    def from_punches(cls, punch_in, punch_out) -> "SessionState":
        if punch_in is None:
            return cls.NONE
        if punch_out is None:
            return cls.OPEN
        return cls.CLOSED


class BreakStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class RequestStatus(str, Enum):
    """Approval workflow status (corrections and leave requests)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuditAction(str, Enum):
    ADMIN_OVERRIDE = "admin_override"
    ATTENDANCE_RESET = "attendance_reset"
    CORRECTION_APPROVED = "correction_approved"
    LEAVE_BALANCE_ADJUSTMENT = "leave_balance_adjustment"
    MONTHLY_LEAVE_ACCRUAL = "monthly_leave_accrual"
    CARRY_FORWARD = "leave_carry_forward"


class NotificationKind(str, Enum):
    AUTO_PUNCH_IN = "auto_punch_in"
    AUTO_PUNCH_OUT = "auto_punch_out"
    EXCESSIVE_BREAK = "excessive_break"
