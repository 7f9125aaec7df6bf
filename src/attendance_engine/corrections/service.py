from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, time
from typing import Any, Optional, Sequence, Union

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..audit.model import AuditEntry
from ..audit.repository import AuditRepository
from ..common.clock import OrgClock
from ..common.validators import optional_text, require_admin, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import AttendanceStatus, AuditAction, RequestStatus, Role, SessionState
from ..core.exceptions import (
    AlreadyActiveSession,
    CorrectionAlreadyPending,
    NotFoundError,
    RequestAlreadyDecided,
    ValidationError,
)
from ..database.locking import UserLock
from .model import CorrectionRequest
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)

TimeInput = Union[datetime, time, None]


def _on_day(work_date: date, value: TimeInput) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.combine(work_date, value)


def _check_order(punch_in: Optional[datetime], punch_out: Optional[datetime]) -> None:
    if punch_out is not None and punch_in is None:
        raise ValidationError("Punch-out requires a punch-in")
    if punch_in is not None and punch_out is not None and punch_out < punch_in:
        raise ValidationError("Punch-out time cannot be earlier than punch-in time")


def snapshot(record: Optional[AttendanceRecord]) -> Optional[dict[str, Any]]:
    if record is None:
        return None
    return {
        "punch_in_time": record.punch_in,
        "punch_out_time": record.punch_out,
        "total_hours": record.total_hours,
        "break_duration": record.break_minutes,
        "production_hours": record.production_hours,
        "status": record.status,
        "is_admin_override": record.is_admin_override,
    }


class CorrectionService:
    def __init__(
        self,
        corrections: CorrectionRepository,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
        audit: AuditRepository,
        lock: UserLock,
        *,
        clock: Optional[OrgClock] = None,
    ):
        self._corrections = corrections
        self._attendance = attendance
        self._attendance_service = attendance_service
        self._audit = audit
        self._lock = lock
        self._clock = clock or OrgClock()

    def submit_correction(
        self,
        *,
        user_id: int,
        work_date: date,
        punch_in: TimeInput = None,
        punch_out: TimeInput = None,
        reason: str,
        document_path: Optional[str] = None,
    ) -> CorrectionRequest:
        reason = require_non_empty(reason, "Reason")
        if punch_in is None and punch_out is None:
            raise ValidationError("At least one of punch-in or punch-out time is required")
        if work_date > self._clock.today():
            raise ValidationError("Cannot request a correction for a future date")

        requested_in = _on_day(work_date, punch_in)
        requested_out = _on_day(work_date, punch_out)
        if requested_in and requested_out and requested_out < requested_in:
            raise ValidationError("Punch-out time cannot be earlier than punch-in time")
        document_path = optional_text(document_path)

        with self._lock.hold(user_id):
            if self._corrections.has_pending(user_id, work_date):
                raise CorrectionAlreadyPending(current_state=RequestStatus.PENDING)
            correction_id = self._corrections.create(
                user_id=int(user_id),
                work_date=work_date,
                requested_punch_in=requested_in,
                requested_punch_out=requested_out,
                reason=reason,
                document_path=document_path,
            )

        logger.info("Correction %s submitted by user %s for %s", correction_id, user_id, work_date)
        return CorrectionRequest(
            correction_id=correction_id,
            user_id=int(user_id),
            work_date=work_date,
            requested_punch_in=requested_in,
            requested_punch_out=requested_out,
            reason=reason,
            document_path=document_path,
        )

    def approve_correction(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        correction_id: int,
        admin_remarks: str = "",
    ) -> AttendanceRecord:
        require_admin(current_role)
        req = self._get(correction_id)

        with self._lock.hold(req.user_id):
            req = self._get_pending(correction_id)
            existing = self._attendance.get_for_user_and_date(req.user_id, req.work_date)
            base = existing or AttendanceRecord(attendance_id=None, user_id=req.user_id, work_date=req.work_date)

            punch_in = req.requested_punch_in or base.punch_in
            punch_out = req.requested_punch_out or base.punch_out
            _check_order(punch_in, punch_out)
            merged = replace(base, punch_in=punch_in, punch_out=punch_out)
            self._ensure_single_open(merged)

            if merged.state == SessionState.CLOSED and merged.attendance_id is not None:
                self._attendance_service.close_record_breaks(int(merged.attendance_id), end=punch_out)
            updated = self._save(self._attendance_service.recompute(merged))

            self._audit.append(
                AuditEntry(
                    action=AuditAction.CORRECTION_APPROVED,
                    actor_id=int(admin_user_id),
                    attendance_id=updated.attendance_id,
                    previous_value=snapshot(existing),
                    new_value=snapshot(updated),
                    reason=req.reason,
                )
            )
            self._decide(req, RequestStatus.APPROVED, admin_user_id, admin_remarks)

        logger.info("Correction %s approved by %s: %s -> %s", correction_id, admin_user_id, req.work_date, updated.status.value)
        return updated

    def reject_correction(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        correction_id: int,
        admin_remarks: str = "",
    ) -> CorrectionRequest:
        require_admin(current_role)
        req = self._get(correction_id)

        with self._lock.hold(req.user_id):
            req = self._get_pending(correction_id)
            decided = self._decide(req, RequestStatus.REJECTED, admin_user_id, admin_remarks)

        logger.info("Correction %s rejected by %s", correction_id, admin_user_id)
        return decided

    def override_attendance(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        user_id: int,
        work_date: date,
        punch_in: TimeInput = None,
        punch_out: TimeInput = None,
        status: Optional[str] = None,
        reason: str,
    ) -> AttendanceRecord:
        require_admin(current_role)
        reason = require_non_empty(reason, "Override reason")
        punch_in_at = _on_day(work_date, punch_in)
        punch_out_at = _on_day(work_date, punch_out)
        _check_order(punch_in_at, punch_out_at)

        explicit_status: Optional[AttendanceStatus] = None
        if status:
            try:
                explicit_status = AttendanceStatus(str(status).strip())
            except ValueError:
                raise ValidationError(f"Unknown attendance status: {status}")

        with self._lock.hold(user_id):
            existing = self._attendance.get_for_user_and_date(user_id, work_date)
            base = existing or AttendanceRecord(attendance_id=None, user_id=int(user_id), work_date=work_date)
            merged = replace(base, punch_in=punch_in_at, punch_out=punch_out_at)
            self._ensure_single_open(merged)

            if merged.state == SessionState.CLOSED and merged.attendance_id is not None:
                self._attendance_service.close_record_breaks(int(merged.attendance_id), end=punch_out_at)

            if merged.state == SessionState.CLOSED:
                derived = self._attendance_service.recompute(merged)
            else:
                # No hours: an open session stays pending, an empty day is absent.
                derived = replace(
                    merged,
                    total_hours=None,
                    production_hours=None,
                    status=AttendanceStatus.PENDING if merged.state == SessionState.OPEN else AttendanceStatus.ABSENT,
                )

            updated = self._save(
                replace(
                    derived,
                    status=explicit_status or derived.status,
                    is_admin_override=True,
                    override_reason=reason,
                    overridden_by=int(admin_user_id),
                )
            )
            self._audit.append(
                AuditEntry(
                    action=AuditAction.ADMIN_OVERRIDE,
                    actor_id=int(admin_user_id),
                    attendance_id=updated.attendance_id,
                    previous_value=snapshot(existing),
                    new_value=snapshot(updated),
                    reason=reason,
                )
            )

        logger.info("Attendance %s/%s overridden by %s: %s", user_id, work_date, admin_user_id, updated.status.value)
        return updated

    def reset_attendance(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        user_id: int,
        work_date: date,
        reason: str,
    ) -> AttendanceRecord:
        require_admin(current_role)
        reason = require_non_empty(reason, "Reset reason")

        with self._lock.hold(user_id):
            existing = self._attendance.get_for_user_and_date(user_id, work_date)
            if not existing:
                raise NotFoundError("No attendance record for this date")

            self._attendance_service.close_record_breaks(int(existing.attendance_id), end=self._clock.now())
            updated = replace(
                existing,
                punch_in=None,
                punch_out=None,
                total_hours=None,
                break_minutes=0,
                production_hours=None,
                status=AttendanceStatus.PENDING,
                is_admin_override=False,
                override_reason=None,
                overridden_by=None,
                is_auto_punch_in=False,
                is_auto_punch_out=False,
                punch_in_location=None,
                punch_out_location=None,
            )
            self._attendance.update(updated)
            self._audit.append(
                AuditEntry(
                    action=AuditAction.ATTENDANCE_RESET,
                    actor_id=int(admin_user_id),
                    attendance_id=updated.attendance_id,
                    previous_value=snapshot(existing),
                    new_value=snapshot(updated),
                    reason=reason,
                )
            )

        logger.info("Attendance %s/%s reset by %s", user_id, work_date, admin_user_id)
        return updated

    def list_corrections(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[CorrectionRequest]:
        return self._corrections.list_corrections(user_id=user_id, status=status, limit=limit)

    def _ensure_single_open(self, record: AttendanceRecord) -> None:
        if record.state != SessionState.OPEN:
            return
        open_record = self._attendance.get_open_for_user(record.user_id)
        if open_record and open_record.attendance_id != record.attendance_id:
            raise AlreadyActiveSession(
                "Another attendance session is still open for this user",
                current_state=open_record.state,
            )

    def _save(self, record: AttendanceRecord) -> AttendanceRecord:
        if record.attendance_id is None:
            return replace(record, attendance_id=self._attendance.create(record))
        self._attendance.update(record)
        return record

    def _get(self, correction_id: int) -> CorrectionRequest:
        req = self._corrections.get(int(correction_id))
        if not req:
            raise NotFoundError("Correction request not found")
        return req

    def _get_pending(self, correction_id: int) -> CorrectionRequest:
        req = self._get(correction_id)
        if req.status != RequestStatus.PENDING:
            raise RequestAlreadyDecided(current_state=req.status)
        return req

    def _decide(
        self,
        req: CorrectionRequest,
        status: RequestStatus,
        admin_user_id: int,
        admin_remarks: str,
    ) -> CorrectionRequest:
        reviewed_at = self._clock.now()
        remarks = optional_text(admin_remarks)
        if not self._corrections.decide(
            correction_id=req.correction_id,
            status=status,
            reviewed_by=int(admin_user_id),
            admin_remarks=remarks,
            reviewed_at=reviewed_at,
        ):
            raise RequestAlreadyDecided()
        return replace(req, status=status, reviewed_by=int(admin_user_id), admin_remarks=remarks, reviewed_at=reviewed_at)
