from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_bool, to_decimal
from .model import AttendanceRecord, Location
from .repository import AttendanceRepository

_COLUMNS = """
    id, user_id, date, punch_in_time, punch_out_time, total_hours, break_duration,
    production_hours, status, is_admin_override, override_reason, overridden_by,
    is_auto_punch_in, is_auto_closed,
    start_location_lat, start_location_lng, start_location_address,
    end_location_lat, end_location_lng, end_location_address,
    created_at, updated_at
"""


def _location(r: dict, prefix: str) -> Optional[Location]:
    loc = Location(
        lat=to_decimal(r.get(f"{prefix}_lat")),
        lng=to_decimal(r.get(f"{prefix}_lng")),
        address=r.get(f"{prefix}_address"),
    )
    return None if loc.is_empty else loc


def _location_params(loc: Optional[Location]) -> tuple:
    if loc is None:
        return (None, None, None)
    return (loc.lat, loc.lng, loc.address)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_record(r: dict) -> AttendanceRecord:
        return AttendanceRecord(
            attendance_id=int(r["id"]),
            user_id=int(r["user_id"]),
            work_date=r["date"],
            punch_in=r.get("punch_in_time"),
            punch_out=r.get("punch_out_time"),
            total_hours=to_decimal(r.get("total_hours")),
            break_minutes=int(r.get("break_duration") or 0),
            production_hours=to_decimal(r.get("production_hours")),
            status=AttendanceStatus(r.get("status") or AttendanceStatus.PENDING.value),
            is_admin_override=to_bool(r.get("is_admin_override")),
            override_reason=r.get("override_reason"),
            overridden_by=r.get("overridden_by"),
            is_auto_punch_in=to_bool(r.get("is_auto_punch_in")),
            is_auto_punch_out=to_bool(r.get("is_auto_closed")),
            punch_in_location=_location(r, "start_location"),
            punch_out_location=_location(r, "end_location"),
            created_at=r.get("created_at"),
            updated_at=r.get("updated_at"),
        )

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def get_open_for_user(self, user_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND punch_in_time IS NOT NULL AND punch_out_time IS NULL
                ORDER BY date DESC
                LIMIT 1
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def list_for_user(self, user_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND date BETWEEN %s AND %s
                ORDER BY date DESC
                """,
                (int(user_id), start, end),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def create(self, record: AttendanceRecord) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    user_id, date, punch_in_time, punch_out_time, total_hours, break_duration,
                    production_hours, status, is_admin_override, override_reason, overridden_by,
                    is_auto_punch_in, is_auto_closed,
                    start_location_lat, start_location_lng, start_location_address,
                    end_location_lat, end_location_lng, end_location_address
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(record.user_id),
                    record.work_date,
                    *self._mutable_params(record),
                ),
            )
            return int(cur.lastrowid)

    def update(self, record: AttendanceRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET punch_in_time=%s, punch_out_time=%s, total_hours=%s, break_duration=%s,
                    production_hours=%s, status=%s, is_admin_override=%s, override_reason=%s,
                    overridden_by=%s, is_auto_punch_in=%s, is_auto_closed=%s,
                    start_location_lat=%s, start_location_lng=%s, start_location_address=%s,
                    end_location_lat=%s, end_location_lng=%s, end_location_address=%s
                WHERE id=%s
                """,
                (*self._mutable_params(record), int(record.attendance_id)),
            )

    @staticmethod
    def _mutable_params(record: AttendanceRecord) -> tuple:
        return (
            record.punch_in,
            record.punch_out,
            record.total_hours,
            int(record.break_minutes or 0),
            record.production_hours,
            record.status.value,
            1 if record.is_admin_override else 0,
            record.override_reason,
            record.overridden_by,
            1 if record.is_auto_punch_in else 0,
            1 if record.is_auto_punch_out else 0,
            *_location_params(record.punch_in_location),
            *_location_params(record.punch_out_location),
        )
