from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import BreakStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .break_repository import BreakRepository
from .model import BreakRecord


class MySQLBreakRepository(BreakRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_break(r: dict) -> BreakRecord:
        duration = r.get("duration_minutes")
        return BreakRecord(
            break_id=int(r["id"]),
            attendance_id=int(r["attendance_record_id"]),
            user_id=int(r["user_id"]),
            start=r["break_start_time"],
            end=r.get("break_end_time"),
            duration_minutes=int(duration) if duration is not None else None,
            status=BreakStatus(r.get("status") or BreakStatus.ACTIVE.value),
            reason=r.get("break_reason"),
            note=r.get("break_note"),
        )

    def get_active_for_user(self, user_id: int) -> Optional[BreakRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, attendance_record_id, user_id, break_start_time, break_end_time,
                       duration_minutes, status, break_reason, break_note
                FROM attendance_breaks
                WHERE user_id=%s AND status=%s
                ORDER BY break_start_time DESC
                LIMIT 1
                """,
                (int(user_id), BreakStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return self._to_break(r) if r else None

    def list_for_record(self, attendance_id: int) -> Sequence[BreakRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, attendance_record_id, user_id, break_start_time, break_end_time,
                       duration_minutes, status, break_reason, break_note
                FROM attendance_breaks
                WHERE attendance_record_id=%s
                ORDER BY break_start_time
                """,
                (int(attendance_id),),
            )
            return [self._to_break(r) for r in fetchall(cur)]

    def create(self, *, attendance_id: int, user_id: int, start: datetime, reason: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_breaks(attendance_record_id, user_id, break_start_time, status, break_reason)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(attendance_id), int(user_id), start, BreakStatus.ACTIVE.value, reason),
            )
            return int(cur.lastrowid)

    def complete(self, *, break_id: int, end: datetime, duration_minutes: int, note: Optional[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_breaks
                SET break_end_time=%s, duration_minutes=%s, status=%s, break_note=COALESCE(%s, break_note)
                WHERE id=%s
                """,
                (end, int(duration_minutes), BreakStatus.COMPLETED.value, note, int(break_id)),
            )

    def total_minutes_for_record(self, attendance_id: int, *, since: Optional[datetime] = None) -> int:
        params: list[object] = [int(attendance_id), BreakStatus.COMPLETED.value]
        since_clause = ""
        if since is not None:
            since_clause = " AND break_start_time >= %s"
            params.append(since)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COALESCE(SUM(duration_minutes), 0) AS total
                FROM attendance_breaks
                WHERE attendance_record_id=%s AND status=%s{since_clause}
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0
