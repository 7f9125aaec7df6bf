from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import LeaveBalance
from .repository import LeaveBalanceRepository


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_balance(r: dict) -> LeaveBalance:
        return LeaveBalance(
            user_id=int(r["user_id"]),
            leave_type=r["leave_type"],
            year=int(r["year"]),
            allocated=to_decimal(r.get("allocated_days")),
            used=to_decimal(r.get("used_days")),
            carried_forward=to_decimal(r.get("carried_forward")),
        )

    def get(self, user_id: int, leave_type: str, year: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, leave_type, year, allocated_days, used_days, carried_forward
                FROM leave_balances
                WHERE user_id=%s AND leave_type=%s AND year=%s
                """,
                (int(user_id), leave_type, int(year)),
            )
            r = fetchone(cur)
            return self._to_balance(r) if r else None

    def list_for_user(self, user_id: int, year: int) -> Sequence[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, leave_type, year, allocated_days, used_days, carried_forward
                FROM leave_balances
                WHERE user_id=%s AND year=%s
                ORDER BY leave_type
                """,
                (int(user_id), int(year)),
            )
            return [self._to_balance(r) for r in fetchall(cur)]

    def ensure(self, user_id: int, leave_type: str, year: int, allocated: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO leave_balances(user_id, leave_type, year, allocated_days, used_days, carried_forward)
                VALUES(%s,%s,%s,%s,0,0)
                """,
                (int(user_id), leave_type, int(year), allocated),
            )
            return cur.rowcount > 0

    def add_allocated(self, user_id: int, leave_type: str, year: int, days: Decimal) -> None:
        self._upsert(user_id, leave_type, year, "allocated_days", days, additive=True)

    def set_allocated(self, user_id: int, leave_type: str, year: int, days: Decimal) -> None:
        self._upsert(user_id, leave_type, year, "allocated_days", days, additive=False)

    def add_used(self, user_id: int, leave_type: str, year: int, days: Decimal) -> None:
        self._upsert(user_id, leave_type, year, "used_days", days, additive=True)

    def set_carried_forward(self, user_id: int, leave_type: str, year: int, days: Decimal) -> None:
        self._upsert(user_id, leave_type, year, "carried_forward", days, additive=False)

    def _upsert(self, user_id: int, leave_type: str, year: int, column: str, days: Decimal, *, additive: bool) -> None:
        if column not in ("allocated_days", "used_days", "carried_forward"):
            raise ValueError(f"Unsupported balance column: {column}")
        assignment = f"{column}={column} + VALUES({column})" if additive else f"{column}=VALUES({column})"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO leave_balances(user_id, leave_type, year, {column})
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE {assignment}
                """,
                (int(user_id), leave_type, int(year), days),
            )
