from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import LeaveRequest
from .repository import LeaveRequestRepository

_SELECT = """
    SELECT id, user_id, leave_type, start_date, end_date, total_days, reason, status,
           document_path, admin_remarks, reviewed_by, reviewed_at, created_at
    FROM leave_requests
"""


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_request(r: dict) -> LeaveRequest:
        return LeaveRequest(
            request_id=int(r["id"]),
            user_id=int(r["user_id"]),
            leave_type=r["leave_type"],
            start_date=r["start_date"],
            end_date=r["end_date"],
            total_days=to_decimal(r["total_days"]),
            reason=r["reason"],
            status=RequestStatus(r.get("status") or RequestStatus.PENDING.value),
            document_path=r.get("document_path"),
            admin_remarks=r.get("admin_remarks"),
            reviewed_by=r.get("reviewed_by"),
            reviewed_at=r.get("reviewed_at"),
            created_at=r.get("created_at"),
        )

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE id=%s", (int(request_id),))
            r = fetchone(cur)
            return self._to_request(r) if r else None

    def create(
        self,
        *,
        user_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        total_days: Decimal,
        reason: str,
        document_path: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(user_id, leave_type, start_date, end_date, total_days, reason, document_path, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    leave_type,
                    start_date,
                    end_date,
                    total_days,
                    reason,
                    document_path,
                    RequestStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def list_requests(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
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
            return [self._to_request(r) for r in fetchall(cur)]

    def has_overlapping_approved(
        self,
        user_id: int,
        start_date: date,
        end_date: date,
        *,
        exclude_request_id: Optional[int] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS cnt
                FROM leave_requests
                WHERE user_id=%s AND status=%s
                  AND start_date <= %s AND end_date >= %s
                  AND id <> %s
                """,
                (
                    int(user_id),
                    RequestStatus.APPROVED.value,
                    end_date,
                    start_date,
                    int(exclude_request_id or 0),
                ),
            )
            r = fetchone(cur)
            return bool(r and int(r["cnt"]) > 0)

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: int,
        admin_remarks: Optional[str],
        reviewed_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, reviewed_by=%s, admin_remarks=%s, reviewed_at=%s
                WHERE id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    admin_remarks,
                    reviewed_at,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
