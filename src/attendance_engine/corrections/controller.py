from __future__ import annotations

from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import parse_date_field, parse_datetime_field, parse_time_field
from ..common.validators import parse_status_filter, require_positive_id
from ..common.web import admin_required, current_role, current_user_id, login_required, payload, respond_with
from ..container import Container
from ..core.enums import Role


def _time_or_datetime(value: Optional[str], field_name: str):
    v = (value or "").strip()
    if not v:
        return None
    if len(v) > 8:
        return parse_datetime_field(v, field_name)
    return parse_time_field(v, field_name)


def register(app: Flask, container: Container) -> None:
    service = container.correction_service

    @app.route("/api/attendance/corrections", methods=["POST"], endpoint="corrections_submit")
    @login_required
    def submit():
        data = payload()
        return respond_with(
            lambda: service.submit_correction(
                user_id=current_user_id(),
                work_date=parse_date_field(data.get("date"), "date"),
                punch_in=_time_or_datetime(data.get("punch_in_time"), "punch_in_time"),
                punch_out=_time_or_datetime(data.get("punch_out_time"), "punch_out_time"),
                reason=data.get("reason", ""),
                document_path=data.get("document_path"),
            ),
            message="Correction request submitted",
        )

    @app.route("/api/attendance/corrections", methods=["GET"], endpoint="corrections_list")
    @login_required
    def list_corrections():
        # Admins may look at everyone; employees only see their own.
        user_id = current_user_id()
        if current_role() == Role.ADMIN:
            raw = request.args.get("user_id")
            user_id = int(raw) if raw and raw.isdigit() else None
        return respond_with(
            lambda: service.list_corrections(user_id=user_id, status=parse_status_filter(request.args.get("status")))
        )

    @app.route("/api/admin/attendance/corrections/<int:correction_id>/approve", methods=["POST"], endpoint="corrections_approve")
    @admin_required
    def approve(correction_id: int):
        data = payload()
        return respond_with(
            service.approve_correction,
            current_role=current_role(),
            admin_user_id=current_user_id(),
            correction_id=correction_id,
            admin_remarks=data.get("remarks", ""),
            message="Correction approved",
        )

    @app.route("/api/admin/attendance/corrections/<int:correction_id>/reject", methods=["POST"], endpoint="corrections_reject")
    @admin_required
    def reject(correction_id: int):
        data = payload()
        return respond_with(
            service.reject_correction,
            current_role=current_role(),
            admin_user_id=current_user_id(),
            correction_id=correction_id,
            admin_remarks=data.get("remarks", ""),
            message="Correction rejected",
        )

    @app.route("/api/admin/attendance/override", methods=["POST"], endpoint="attendance_override")
    @admin_required
    def override():
        data = payload()
        return respond_with(
            lambda: service.override_attendance(
                current_role=current_role(),
                admin_user_id=current_user_id(),
                user_id=require_positive_id(data.get("user_id"), "user_id"),
                work_date=parse_date_field(data.get("date"), "date"),
                punch_in=_time_or_datetime(data.get("punch_in_time"), "punch_in_time"),
                punch_out=_time_or_datetime(data.get("punch_out_time"), "punch_out_time"),
                status=data.get("status"),
                reason=data.get("reason", ""),
            ),
            message="Attendance overridden",
        )

    @app.route("/api/admin/attendance/reset", methods=["POST"], endpoint="attendance_reset")
    @admin_required
    def reset():
        data = payload()
        return respond_with(
            lambda: service.reset_attendance(
                current_role=current_role(),
                admin_user_id=current_user_id(),
                user_id=require_positive_id(data.get("user_id"), "user_id"),
                work_date=parse_date_field(data.get("date"), "date"),
                reason=data.get("reason", ""),
            ),
            message="Attendance reset",
        )
