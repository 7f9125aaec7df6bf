from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import LeaveAccrual
from .repository import LeaveAccrualRepository


class MySQLLeaveAccrualRepository(LeaveAccrualRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record(self, accrual: LeaveAccrual) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO leave_accruals(user_id, leave_type, year, month, days_accrued, accrual_date)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(accrual.user_id),
                    accrual.leave_type,
                    int(accrual.year),
                    int(accrual.month),
                    accrual.days_accrued,
                    accrual.accrual_date,
                ),
            )
            return cur.rowcount > 0
