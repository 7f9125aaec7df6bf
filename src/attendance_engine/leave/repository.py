from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import LeaveAccrual, LeaveBalance, LeavePolicy, LeaveRequest


class LeavePolicyRepository(Protocol):
    def get(self, leave_type: str) -> Optional[LeavePolicy]:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = False) -> Sequence[LeavePolicy]:
        raise NotImplementedError

    def update(self, policy: LeavePolicy) -> bool:
        raise NotImplementedError


class LeaveBalanceRepository(Protocol):
    def get(self, user_id: int, leave_type: str, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def list_for_user(self, user_id: int, year: int) -> Sequence[LeaveBalance]:
        raise NotImplementedError

    def ensure(self, user_id: int, leave_type: str, year: int, allocated: Decimal) -> bool:
        """Insert the row if missing; True when a row was created."""
        raise NotImplementedError

    def add_allocated(self, user_id: int, leave_type: str, year: int, days: Decimal) -> None:
        raise NotImplementedError

    def set_allocated(self, user_id: int, leave_type: str, year: int, days: Decimal) -> None:
        raise NotImplementedError

    def add_used(self, user_id: int, leave_type: str, year: int, days: Decimal) -> None:
        raise NotImplementedError

    def set_carried_forward(self, user_id: int, leave_type: str, year: int, days: Decimal) -> None:
        raise NotImplementedError


class LeaveRequestRepository(Protocol):
    def get(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        total_days: Decimal,
        reason: str,
        document_path: Optional[str],
    ) -> int:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def has_overlapping_approved(
        self,
        user_id: int,
        start_date: date,
        end_date: date,
        *,
        exclude_request_id: Optional[int] = None,
    ) -> bool:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: int,
        admin_remarks: Optional[str],
        reviewed_at: datetime,
    ) -> bool:
        raise NotImplementedError


class LeaveAccrualRepository(Protocol):
    def record(self, accrual: LeaveAccrual) -> bool:
        """Insert unless (user, type, year, month) exists; True when inserted."""
        raise NotImplementedError
