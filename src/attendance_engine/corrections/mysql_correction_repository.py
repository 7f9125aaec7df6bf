from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CorrectionRequest
from .repository import CorrectionRepository

_SELECT = """
    SELECT id, user_id, date, requested_punch_in, requested_punch_out, reason, document_path,
           status, admin_remarks, reviewed_by, reviewed_at, created_at
    FROM attendance_corrections
"""


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_correction(r: dict) -> CorrectionRequest:
        return CorrectionRequest(
            correction_id=int(r["id"]),
            user_id=int(r["user_id"]),
            work_date=r["date"],
            requested_punch_in=r.get("requested_punch_in"),
            requested_punch_out=r.get("requested_punch_out"),
            reason=r["reason"],
            status=RequestStatus(r.get("status") or RequestStatus.PENDING.value),
            document_path=r.get("document_path"),
            admin_remarks=r.get("admin_remarks"),
            reviewed_by=r.get("reviewed_by"),
            reviewed_at=r.get("reviewed_at"),
            created_at=r.get("created_at"),
        )

    def get(self, correction_id: int) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE id=%s", (int(correction_id),))
            r = fetchone(cur)
            return self._to_correction(r) if r else None

    def has_pending(self, user_id: int, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id FROM attendance_corrections
                WHERE user_id=%s AND date=%s AND status=%s
                LIMIT 1
                """,
                (int(user_id), work_date, RequestStatus.PENDING.value),
            )
            return fetchone(cur) is not None

    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        requested_punch_in: Optional[datetime],
        requested_punch_out: Optional[datetime],
        reason: str,
        document_path: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_corrections(
                    user_id, date, requested_punch_in, requested_punch_out, reason, document_path, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    work_date,
                    requested_punch_in,
                    requested_punch_out,
                    reason,
                    document_path,
                    RequestStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def list_corrections(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        clauses = ["1=1"]
        params: list[object] = []
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        params.append(int(limit))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {where} ORDER BY created_at DESC, id DESC LIMIT %s", tuple(params))
            return [self._to_correction(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        correction_id: int,
        status: RequestStatus,
        reviewed_by: int,
        admin_remarks: Optional[str],
        reviewed_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_corrections
                SET status=%s, reviewed_by=%s, admin_remarks=%s, reviewed_at=%s
                WHERE id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    admin_remarks,
                    reviewed_at,
                    int(correction_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
