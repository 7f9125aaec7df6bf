"""Leave eligibility rules.

Rules run in a fixed order and the first failure wins, so the reason a user
sees is stable. Balances are read fresh on every call.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from ..common.clock import OrgClock
from ..core.exceptions import ValidationError
from .model import ZERO, LeaveBalance, LeaveBalanceSummary, LeaveValidation
from .repository import LeaveBalanceRepository, LeavePolicyRepository, LeaveRequestRepository

logger = logging.getLogger(__name__)

RULE_POLICY_NOT_FOUND = "policy_not_found"
RULE_MAX_CONSECUTIVE = "max_consecutive_days"
RULE_NOTICE_PERIOD = "notice_period"
RULE_INSUFFICIENT_BALANCE = "insufficient_balance"
RULE_OVERLAP = "overlap"


def format_days(value: Decimal) -> str:
    """12.00 -> '12', 2.50 -> '2.5'."""
    normalized = Decimal(value).normalize()
    return f"{normalized:f}"


def leave_days_between(start_date: date, end_date: date) -> int:
    return (end_date - start_date).days + 1


class LeavePolicyEngine:
    def __init__(
        self,
        policies: LeavePolicyRepository,
        balances: LeaveBalanceRepository,
        requests: LeaveRequestRepository,
        *,
        clock: Optional[OrgClock] = None,
    ):
        self._policies = policies
        self._balances = balances
        self._requests = requests
        self._clock = clock or OrgClock()

    def validate_request(
        self,
        user_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        *,
        today: Optional[date] = None,
    ) -> LeaveValidation:
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        today = today or self._clock.today()

        policy = self._policies.get(leave_type)
        if not policy or not policy.is_active:
            return LeaveValidation(
                valid=False,
                reason="Leave policy not found for this leave type",
                rule=RULE_POLICY_NOT_FOUND,
            )

        days = leave_days_between(start_date, end_date)

        if policy.max_consecutive_days > 0 and days > policy.max_consecutive_days:
            return LeaveValidation(
                valid=False,
                leave_days=days,
                reason=f"Maximum consecutive leave days for {leave_type} is {policy.max_consecutive_days}",
                rule=RULE_MAX_CONSECUTIVE,
            )

        if (start_date - today).days < policy.notice_period_days:
            return LeaveValidation(
                valid=False,
                leave_days=days,
                reason=f"Minimum notice period for {leave_type} leave is {policy.notice_period_days} days",
                rule=RULE_NOTICE_PERIOD,
            )

        failure = self.check_availability(user_id, leave_type, start_date, end_date, days)
        if failure:
            return failure

        return LeaveValidation(valid=True, leave_days=days)

    def check_availability(
        self,
        user_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        days: int,
        *,
        exclude_request_id: Optional[int] = None,
    ) -> Optional[LeaveValidation]:
        """Balance and overlap rules; re-run at approval time."""
        available = self.remaining(user_id, leave_type, start_date.year)
        if available < Decimal(days):
            return LeaveValidation(
                valid=False,
                leave_days=days,
                reason=f"Insufficient leave balance. Available: {format_days(available)} days, Requested: {days} days",
                rule=RULE_INSUFFICIENT_BALANCE,
            )

        if self._requests.has_overlapping_approved(
            user_id, start_date, end_date, exclude_request_id=exclude_request_id
        ):
            return LeaveValidation(
                valid=False,
                leave_days=days,
                reason="Leave request overlaps with existing approved leave",
                rule=RULE_OVERLAP,
            )
        return None

    def remaining(self, user_id: int, leave_type: str, year: int) -> Decimal:
        balance = self._balances.get(user_id, leave_type, year)
        return balance.remaining if balance else ZERO

    def compute_balance(self, user_id: int, year: int) -> List[LeaveBalanceSummary]:
        stored = {b.leave_type: b for b in self._balances.list_for_user(user_id, year)}
        out: List[LeaveBalanceSummary] = []
        for policy in self._policies.list_all(active_only=True):
            balance = stored.get(policy.leave_type) or LeaveBalance(
                user_id=int(user_id), leave_type=policy.leave_type, year=int(year)
            )
            out.append(LeaveBalanceSummary.from_balance(balance))
        return out
