from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Holiday
from .repository import HolidayRepository, SettingsRepository


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_all(self) -> Mapping[str, str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT setting_key, setting_value FROM attendance_settings")
            return {r["setting_key"]: r["setting_value"] for r in fetchall(cur)}

    def upsert(self, key: str, value: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_settings(setting_key, setting_value)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE setting_value=VALUES(setting_value)
                """,
                (key, value),
            )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_holiday(r: dict) -> Holiday:
        return Holiday(
            holiday_id=int(r["id"]),
            holiday_date=r["holiday_date"],
            name=r["holiday_name"],
            holiday_type=r.get("holiday_type") or "company",
            created_by=r.get("created_by"),
            created_at=r.get("created_at"),
        )

    def get_by_date(self, holiday_date: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, holiday_date, holiday_name, holiday_type, created_by, created_at
                FROM attendance_holidays
                WHERE holiday_date=%s
                """,
                (holiday_date,),
            )
            r = fetchone(cur)
            return self._to_holiday(r) if r else None

    def list_range(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        clauses = ["1=1"]
        params: list[object] = []
        if start is not None:
            clauses.append("holiday_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("holiday_date <= %s")
            params.append(end)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, holiday_date, holiday_name, holiday_type, created_by, created_at
                FROM attendance_holidays
                WHERE {where}
                ORDER BY holiday_date DESC
                """,
                tuple(params),
            )
            return [self._to_holiday(r) for r in fetchall(cur)]

    def create(self, *, holiday_date: date, name: str, holiday_type: str, created_by: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_holidays(holiday_date, holiday_name, holiday_type, created_by)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE holiday_name=VALUES(holiday_name), holiday_type=VALUES(holiday_type)
                """,
                (holiday_date, name, holiday_type, created_by),
            )
            return int(cur.lastrowid)

    def update(self, *, holiday_id: int, holiday_date: date, name: str, holiday_type: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_holidays
                SET holiday_date=%s, holiday_name=%s, holiday_type=%s
                WHERE id=%s
                """,
                (holiday_date, name, holiday_type, int(holiday_id)),
            )
            return cur.rowcount > 0

    def delete(self, *, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_holidays WHERE id=%s", (int(holiday_id),))
            return cur.rowcount > 0
