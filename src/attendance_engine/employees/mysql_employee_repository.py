from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_bool
from .model import Employee
from .repository import EmployeeRepository


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_employee(r: dict) -> Employee:
        try:
            role = Role(r.get("role"))
        except ValueError:
            role = Role.EMPLOYEE
        return Employee(
            user_id=int(r["user_id"]),
            full_name=r["full_name"],
            role=role,
            is_active=to_bool(r.get("is_active")),
        )

    def get_by_id(self, user_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, full_name, role, is_active FROM employees WHERE user_id=%s",
                (int(user_id),),
            )
            r = fetchone(cur)
            return self._to_employee(r) if r else None

    def list_active_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM employees WHERE is_active=1 ORDER BY user_id")
            return [int(r["user_id"]) for r in fetchall(cur)]

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, full_name, role, is_active FROM employees WHERE is_active=1 ORDER BY full_name, user_id"
            )
            return [self._to_employee(r) for r in fetchall(cur)]
