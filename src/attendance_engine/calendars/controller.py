from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_date_field
from ..common.web import admin_required, current_role, current_user_id, login_required, payload, respond_with
from ..container import Container


def register(app: Flask, container: Container) -> None:
    holidays = container.holiday_service
    settings = container.settings_service

    @app.route("/api/attendance/holidays", methods=["GET"], endpoint="holidays_list")
    @login_required
    def list_holidays():
        start = request.args.get("start_date")
        end = request.args.get("end_date")
        return respond_with(
            lambda: holidays.list_holidays(
                start=parse_date_field(start, "start_date") if start else None,
                end=parse_date_field(end, "end_date") if end else None,
            )
        )

    @app.route("/api/admin/attendance/holidays", methods=["POST"], endpoint="holidays_create")
    @admin_required
    def create_holiday():
        data = payload()
        return respond_with(
            lambda: holidays.add_holiday(
                current_role=current_role(),
                actor_id=current_user_id(),
                holiday_date=parse_date_field(data.get("date"), "date"),
                name=data.get("name", ""),
                holiday_type=data.get("type") or "company",
            ),
            message="Holiday saved",
        )

    @app.route("/api/admin/attendance/holidays/<int:holiday_id>", methods=["PUT"], endpoint="holidays_update")
    @admin_required
    def update_holiday(holiday_id: int):
        data = payload()
        return respond_with(
            lambda: holidays.update_holiday(
                current_role=current_role(),
                holiday_id=holiday_id,
                holiday_date=parse_date_field(data.get("date"), "date"),
                name=data.get("name", ""),
                holiday_type=data.get("type") or "company",
            ),
            message="Holiday updated",
        )

    @app.route("/api/admin/attendance/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="holidays_delete")
    @admin_required
    def delete_holiday(holiday_id: int):
        return respond_with(
            holidays.delete_holiday,
            current_role=current_role(),
            holiday_id=holiday_id,
            message="Holiday deleted",
        )

    @app.route("/api/admin/attendance/settings", methods=["GET"], endpoint="attendance_settings_get")
    @admin_required
    def get_settings():
        return respond_with(settings.get_settings)

    @app.route("/api/admin/attendance/settings", methods=["PUT"], endpoint="attendance_settings_update")
    @admin_required
    def update_settings():
        return respond_with(
            settings.update_settings,
            current_role=current_role(),
            values=payload(),
            message="Settings updated",
        )
