from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_bool, to_decimal
from .model import LeavePolicy
from .repository import LeavePolicyRepository

_SELECT = """
    SELECT id, leave_type, annual_allocation, monthly_accrual, max_carry_forward,
           max_consecutive_days, notice_period_days, requires_documentation, is_active
    FROM leave_policies
"""


class MySQLLeavePolicyRepository(LeavePolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_policy(r: dict) -> LeavePolicy:
        return LeavePolicy(
            policy_id=int(r["id"]),
            leave_type=r["leave_type"],
            annual_allocation=to_decimal(r.get("annual_allocation")),
            monthly_accrual=to_decimal(r.get("monthly_accrual")),
            max_carry_forward=to_decimal(r.get("max_carry_forward")),
            max_consecutive_days=int(r.get("max_consecutive_days") or 0),
            notice_period_days=int(r.get("notice_period_days") or 0),
            requires_documentation=to_bool(r.get("requires_documentation")),
            is_active=to_bool(r.get("is_active")),
        )

    def get(self, leave_type: str) -> Optional[LeavePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE leave_type=%s", (leave_type,))
            r = fetchone(cur)
            return self._to_policy(r) if r else None

    def list_all(self, *, active_only: bool = False) -> Sequence[LeavePolicy]:
        where = " WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + where + " ORDER BY leave_type")
            return [self._to_policy(r) for r in fetchall(cur)]

    def update(self, policy: LeavePolicy) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_policies
                SET annual_allocation=%s, monthly_accrual=%s, max_carry_forward=%s,
                    max_consecutive_days=%s, notice_period_days=%s,
                    requires_documentation=%s, is_active=%s
                WHERE leave_type=%s
                """,
                (
                    policy.annual_allocation,
                    policy.monthly_accrual,
                    policy.max_carry_forward,
                    int(policy.max_consecutive_days),
                    int(policy.notice_period_days),
                    1 if policy.requires_documentation else 0,
                    1 if policy.is_active else 0,
                    policy.leave_type,
                ),
            )
            return cur.rowcount > 0
