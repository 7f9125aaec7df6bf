from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from ..common.sweep import SweepResult
from ..core.enums import RequestStatus

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class LeavePolicy:
    leave_type: str
    annual_allocation: Decimal = ZERO
    monthly_accrual: Decimal = ZERO
    max_carry_forward: Decimal = ZERO
    max_consecutive_days: int = 0
    notice_period_days: int = 0
    requires_documentation: bool = False
    is_active: bool = True
    policy_id: Optional[int] = None


@dataclass(frozen=True)
class LeaveBalance:
    user_id: int
    leave_type: str
    year: int
    allocated: Decimal = ZERO
    used: Decimal = ZERO
    carried_forward: Decimal = ZERO

    @property
    def remaining(self) -> Decimal:
        return self.allocated + self.carried_forward - self.used


@dataclass(frozen=True)
class LeaveBalanceSummary:
    """Formatted balance row returned to callers (zero-filled per policy)."""

    leave_type: str
    year: int
    allocated: Decimal
    used: Decimal
    carried_forward: Decimal
    remaining: Decimal

    @classmethod
    def from_balance(cls, balance: LeaveBalance) -> "LeaveBalanceSummary":
        return cls(
            leave_type=balance.leave_type,
            year=balance.year,
            allocated=balance.allocated,
            used=balance.used,
            carried_forward=balance.carried_forward,
            remaining=balance.remaining,
        )


@dataclass(frozen=True)
class EmployeeLeaveBalances:
    user_id: int
    full_name: str
    balances: List[LeaveBalanceSummary]


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    user_id: int
    leave_type: str
    start_date: date
    end_date: date
    total_days: Decimal
    reason: str
    status: RequestStatus = RequestStatus.PENDING
    document_path: Optional[str] = None
    admin_remarks: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class LeaveAccrual:
    user_id: int
    leave_type: str
    year: int
    month: int
    days_accrued: Decimal
    accrual_date: date


@dataclass(frozen=True)
class LeaveValidation:
    valid: bool
    leave_days: int = 0
    reason: Optional[str] = None
    rule: Optional[str] = None


@dataclass
class AccrualRunResult(SweepResult):
    year: int = 0
    month: int = 0
    entries_accrued: int = 0
