from __future__ import annotations

from typing import Sequence

from ..core.enums import AuditAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, from_json, to_json
from .model import AuditEntry
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, entry: AuditEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_audit(attendance_id, action_type, actor_id, previous_value, new_value, reason)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.attendance_id,
                    entry.action.value,
                    entry.actor_id,
                    to_json(entry.previous_value),
                    to_json(entry.new_value),
                    entry.reason,
                ),
            )
            return int(cur.lastrowid)

    def list_for_attendance(self, attendance_id: int) -> Sequence[AuditEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, attendance_id, action_type, actor_id, previous_value, new_value, reason, created_at
                FROM attendance_audit
                WHERE attendance_id=%s
                ORDER BY created_at, id
                """,
                (int(attendance_id),),
            )
            return [
                AuditEntry(
                    audit_id=int(r["id"]),
                    attendance_id=r.get("attendance_id"),
                    action=AuditAction(r["action_type"]),
                    actor_id=r.get("actor_id"),
                    previous_value=from_json(r.get("previous_value")),
                    new_value=from_json(r.get("new_value")),
                    reason=r.get("reason"),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
