from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence

from ..audit.model import AuditEntry
from ..audit.repository import AuditRepository
from ..common.clock import OrgClock
from ..common.sweep import SweepResult
from ..common.validators import optional_text, require_admin, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import AuditAction, RequestStatus, Role
from ..core.exceptions import (
    NotFoundError,
    PolicyNotFoundError,
    PolicyViolationError,
    RequestAlreadyDecided,
    ValidationError,
)
from ..database.locking import UserLock
from ..employees.repository import EmployeeRepository
from .model import ZERO, EmployeeLeaveBalances, LeaveBalanceSummary, LeavePolicy, LeaveRequest, LeaveValidation
from .policy_engine import RULE_POLICY_NOT_FOUND, LeavePolicyEngine
from .repository import LeaveBalanceRepository, LeavePolicyRepository, LeaveRequestRepository

logger = logging.getLogger(__name__)

RULE_DOCUMENTATION = "documentation_required"


def _raise_for(validation: LeaveValidation) -> None:
    if validation.valid:
        return
    if validation.rule == RULE_POLICY_NOT_FOUND:
        raise PolicyNotFoundError(validation.reason)
    raise PolicyViolationError(validation.reason, rule=validation.rule or "policy")


def _to_days(value: Any, field_name: str) -> Decimal:
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")


class LeaveService:
    def __init__(
        self,
        policies: LeavePolicyRepository,
        balances: LeaveBalanceRepository,
        requests: LeaveRequestRepository,
        audit: AuditRepository,
        employees: EmployeeRepository,
        engine: LeavePolicyEngine,
        lock: UserLock,
        *,
        clock: Optional[OrgClock] = None,
    ):
        self._policies = policies
        self._balances = balances
        self._requests = requests
        self._audit = audit
        self._employees = employees
        self._engine = engine
        self._lock = lock
        self._clock = clock or OrgClock()

    def validate_request(
        self,
        *,
        user_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
    ) -> LeaveValidation:
        leave_type = require_non_empty(leave_type, "Leave type")
        return self._engine.validate_request(user_id, leave_type, start_date, end_date, today=self._clock.today())

    def submit_leave_request(
        self,
        *,
        user_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        document_path: Optional[str] = None,
    ) -> LeaveRequest:
        leave_type = require_non_empty(leave_type, "Leave type")
        reason = require_non_empty(reason, "Reason")
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        document_path = optional_text(document_path)

        with self._lock.hold(user_id):
            validation = self._engine.validate_request(
                user_id, leave_type, start_date, end_date, today=self._clock.today()
            )
            _raise_for(validation)

            policy = self._policies.get(leave_type)
            if policy and policy.requires_documentation and not document_path:
                raise PolicyViolationError(
                    f"Supporting documentation is required for {leave_type} leave",
                    rule=RULE_DOCUMENTATION,
                )

            total_days = Decimal(validation.leave_days)
            request_id = self._requests.create(
                user_id=int(user_id),
                leave_type=leave_type,
                start_date=start_date,
                end_date=end_date,
                total_days=total_days,
                reason=reason,
                document_path=document_path,
            )

        logger.info("Leave request %s submitted by user %s (%s, %s days)", request_id, user_id, leave_type, total_days)
        return LeaveRequest(
            request_id=request_id,
            user_id=int(user_id),
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            reason=reason,
            document_path=document_path,
        )

    def approve_leave(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        request_id: int,
        admin_remarks: str = "",
    ) -> LeaveRequest:
        require_admin(current_role)
        req = self._get_request(request_id)

        with self._lock.hold(req.user_id):
            req = self._get_pending(request_id)
            failure = self._engine.check_availability(
                req.user_id,
                req.leave_type,
                req.start_date,
                req.end_date,
                int(req.total_days),
                exclude_request_id=req.request_id,
            )
            if failure:
                _raise_for(failure)
            self._balances.add_used(req.user_id, req.leave_type, req.start_date.year, req.total_days)
            decided = self._decide(req, RequestStatus.APPROVED, admin_user_id, admin_remarks)

        logger.info("Leave request %s approved by %s", request_id, admin_user_id)
        return decided

    def reject_leave(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        request_id: int,
        admin_remarks: str = "",
    ) -> LeaveRequest:
        require_admin(current_role)
        req = self._get_request(request_id)

        with self._lock.hold(req.user_id):
            req = self._get_pending(request_id)
            decided = self._decide(req, RequestStatus.REJECTED, admin_user_id, admin_remarks)

        logger.info("Leave request %s rejected by %s", request_id, admin_user_id)
        return decided

    def get_balances(self, user_id: int, *, year: Optional[int] = None) -> List[LeaveBalanceSummary]:
        return self._engine.compute_balance(user_id, year or self._clock.today().year)

    def list_all_balances(self, *, current_role: Role, year: Optional[int] = None) -> List[EmployeeLeaveBalances]:
        """Balances of every active non-admin employee, ordered by name."""
        require_admin(current_role)
        year = year or self._clock.today().year
        return [
            EmployeeLeaveBalances(
                user_id=employee.user_id,
                full_name=employee.full_name,
                balances=self._engine.compute_balance(employee.user_id, year),
            )
            for employee in self._employees.list_active()
            if employee.role != Role.ADMIN
        ]

    def adjust_balance(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        user_id: int,
        leave_type: str,
        year: int,
        adjustment: Any,
        reason: str,
    ) -> LeaveBalanceSummary:
        require_admin(current_role)
        reason = require_non_empty(reason, "Reason")
        delta = _to_days(adjustment, "Adjustment")
        if not self._policies.get(leave_type):
            raise PolicyNotFoundError()

        with self._lock.hold(user_id):
            current = self._balances.get(user_id, leave_type, year)
            previous = current.allocated if current else ZERO
            allocated = max(ZERO, previous + delta)
            self._balances.set_allocated(user_id, leave_type, year, allocated)
            self._audit.append(
                AuditEntry(
                    action=AuditAction.LEAVE_BALANCE_ADJUSTMENT,
                    actor_id=int(admin_user_id),
                    previous_value={"user_id": user_id, "leave_type": leave_type, "year": year, "allocated_days": previous},
                    new_value={
                        "user_id": user_id,
                        "leave_type": leave_type,
                        "year": year,
                        "allocated_days": allocated,
                        "adjustment": delta,
                    },
                    reason=reason,
                )
            )
            updated = self._balances.get(user_id, leave_type, year)

        logger.info("Leave balance %s/%s/%s adjusted by %s: %s -> %s", user_id, leave_type, year, delta, previous, allocated)
        return LeaveBalanceSummary.from_balance(updated)

    def initialize_balances(self, user_id: int, *, year: Optional[int] = None) -> int:
        """Create missing balance rows with the annual allocation."""
        year = year or self._clock.today().year
        created = 0
        for policy in self._policies.list_all(active_only=True):
            if self._balances.ensure(user_id, policy.leave_type, year, policy.annual_allocation):
                created += 1
        if created:
            logger.info("Initialized %s leave balances for user %s in %s", created, user_id, year)
        return created

    def list_policies(self, *, active_only: bool = False) -> Sequence[LeavePolicy]:
        return self._policies.list_all(active_only=active_only)

    def update_policy(self, *, current_role: Role, leave_type: str, changes: dict) -> LeavePolicy:
        require_admin(current_role)
        policy = self._policies.get(leave_type)
        if not policy:
            raise PolicyNotFoundError()

        updates: dict[str, Any] = {}
        for key in ("annual_allocation", "monthly_accrual", "max_carry_forward"):
            if key in changes:
                value = _to_days(changes[key], key)
                if value < 0:
                    raise ValidationError(f"{key} cannot be negative")
                updates[key] = value
        for key in ("max_consecutive_days", "notice_period_days"):
            if key in changes:
                try:
                    value = int(changes[key])
                except (TypeError, ValueError):
                    raise ValidationError(f"{key} must be a whole number")
                if value < 0:
                    raise ValidationError(f"{key} cannot be negative")
                updates[key] = value
        for key in ("requires_documentation", "is_active"):
            if key in changes:
                updates[key] = bool(changes[key])

        if not updates:
            raise ValidationError("No policy fields provided")

        updated = replace(policy, **updates)
        self._policies.update(updated)
        logger.info("Leave policy %s updated: %s", leave_type, sorted(updates))
        return updated

    def list_requests(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        return self._requests.list_requests(user_id=user_id, status=status, limit=limit)

    def run_carry_forward(
        self,
        *,
        current_role: Role,
        admin_user_id: Optional[int] = None,
        from_year: int,
        cancel_event=None,
    ) -> SweepResult:
        """Carry unused days of ``from_year`` into the next year, capped per policy.

        Sets (rather than adds) the next year's ``carried_forward`` so a rerun
        gives the same result.
        """
        require_admin(current_role)
        policies = [p for p in self._policies.list_all(active_only=True) if p.max_carry_forward > 0]
        result = SweepResult()

        for user_id in self._employees.list_active_ids():
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                break
            result.processed += 1
            try:
                with self._lock.hold(user_id):
                    for policy in policies:
                        balance = self._balances.get(user_id, policy.leave_type, from_year)
                        remaining = max(balance.remaining, ZERO) if balance else ZERO
                        self._balances.set_carried_forward(
                            user_id,
                            policy.leave_type,
                            from_year + 1,
                            min(remaining, policy.max_carry_forward),
                        )
                result.succeeded += 1
            except Exception as e:
                logger.error("Carry-forward failed for user %s", user_id, exc_info=True)
                result.record_failure(user_id, e)

        self._audit.append(
            AuditEntry(
                action=AuditAction.CARRY_FORWARD,
                actor_id=admin_user_id,
                new_value={
                    "from_year": from_year,
                    "to_year": from_year + 1,
                    "success_count": result.succeeded,
                    "error_count": result.failed,
                },
                reason=f"Carry forward {from_year} -> {from_year + 1}",
            )
        )
        logger.info("Carry-forward %s done: %s ok, %s failed", from_year, result.succeeded, result.failed)
        return result

    def _get_request(self, request_id: int) -> LeaveRequest:
        req = self._requests.get(int(request_id))
        if not req:
            raise NotFoundError("Leave request not found")
        return req

    def _get_pending(self, request_id: int) -> LeaveRequest:
        req = self._get_request(request_id)
        if req.status != RequestStatus.PENDING:
            raise RequestAlreadyDecided(current_state=req.status)
        return req

    def _decide(self, req: LeaveRequest, status: RequestStatus, admin_user_id: int, admin_remarks: str) -> LeaveRequest:
        reviewed_at = self._clock.now()
        remarks = optional_text(admin_remarks)
        if not self._requests.decide(
            request_id=req.request_id,
            status=status,
            reviewed_by=int(admin_user_id),
            admin_remarks=remarks,
            reviewed_at=reviewed_at,
        ):
            raise RequestAlreadyDecided()
        return replace(req, status=status, reviewed_by=int(admin_user_id), admin_remarks=remarks, reviewed_at=reviewed_at)
