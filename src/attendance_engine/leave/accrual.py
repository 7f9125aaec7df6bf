from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..audit.model import AuditEntry
from ..audit.repository import AuditRepository
from ..common.clock import OrgClock
from ..core.enums import AuditAction
from ..core.exceptions import ValidationError
from ..database.locking import UserLock
from ..employees.repository import EmployeeRepository
from .model import AccrualRunResult, LeaveAccrual
from .repository import LeaveAccrualRepository, LeaveBalanceRepository, LeavePolicyRepository

logger = logging.getLogger(__name__)


class LeaveAccrualJob:
    """Monthly accrual sweep over active employees and accruing policies.

    The (user, type, year, month) ledger row is the idempotency key: a rerun
    of the same month adds nothing.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        policies: LeavePolicyRepository,
        balances: LeaveBalanceRepository,
        accruals: LeaveAccrualRepository,
        audit: AuditRepository,
        lock: UserLock,
        *,
        clock: Optional[OrgClock] = None,
    ):
        self._employees = employees
        self._policies = policies
        self._balances = balances
        self._accruals = accruals
        self._audit = audit
        self._lock = lock
        self._clock = clock or OrgClock()

    def run_monthly_accrual(
        self,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
        actor_id: Optional[int] = None,
        cancel_event=None,
    ) -> AccrualRunResult:
        today = self._clock.today()
        year = int(year or today.year)
        month = int(month or today.month)
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")
        accrual_date = date(year, month, 1)

        policies = [p for p in self._policies.list_all(active_only=True) if p.monthly_accrual > 0]
        result = AccrualRunResult(year=year, month=month)
        logger.info("Monthly leave accrual %04d-%02d started (%s policies)", year, month, len(policies))

        for user_id in self._employees.list_active_ids():
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Monthly leave accrual cancelled after %s employees", result.processed)
                result.cancelled = True
                break
            result.processed += 1
            try:
                accrued = self._accrue_user(user_id, policies, year=year, month=month, accrual_date=accrual_date)
            except Exception as e:
                logger.error("Leave accrual failed for user %s", user_id, exc_info=True)
                result.record_failure(user_id, e)
                continue
            if accrued:
                result.succeeded += 1
                result.entries_accrued += accrued
            else:
                result.skipped += 1

        self._audit.append(
            AuditEntry(
                action=AuditAction.MONTHLY_LEAVE_ACCRUAL,
                actor_id=actor_id,
                new_value={
                    "year": year,
                    "month": month,
                    "success_count": result.succeeded + result.skipped,
                    "error_count": result.failed,
                    "entries_accrued": result.entries_accrued,
                },
                reason=f"Monthly leave accrual for {year:04d}-{month:02d}",
            )
        )
        logger.info(
            "Monthly leave accrual %04d-%02d done: %s accrued, %s already done, %s failed",
            year,
            month,
            result.succeeded,
            result.skipped,
            result.failed,
        )
        return result

    def _accrue_user(self, user_id: int, policies, *, year: int, month: int, accrual_date: date) -> int:
        accrued = 0
        with self._lock.hold(user_id):
            for policy in policies:
                entry = LeaveAccrual(
                    user_id=int(user_id),
                    leave_type=policy.leave_type,
                    year=year,
                    month=month,
                    days_accrued=policy.monthly_accrual,
                    accrual_date=accrual_date,
                )
                if not self._accruals.record(entry):
                    logger.debug("Accrual %s/%s/%04d-%02d already recorded", user_id, policy.leave_type, year, month)
                    continue
                self._balances.add_allocated(user_id, policy.leave_type, year, policy.monthly_accrual)
                accrued += 1
        return accrued
