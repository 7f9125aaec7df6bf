from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import parse_date_field
from ..common.validators import optional_int
from ..common.web import current_role, current_user_id, login_required, payload, respond_with
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .model import Location


def parse_location(data: dict) -> Optional[Location]:
    def _coord(key: str) -> Optional[Decimal]:
        raw = data.get(key)
        if raw in (None, ""):
            return None
        try:
            return Decimal(str(raw))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{key} must be a number")

    loc = Location(
        lat=_coord("latitude"),
        lng=_coord("longitude"),
        address=(str(data.get("address") or "").strip() or None),
    )
    return None if loc.is_empty else loc


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/punch-in", methods=["POST"], endpoint="attendance_punch_in")
    @login_required
    def punch_in():
        data = payload()
        return respond_with(
            lambda: service.punch_in(current_user_id(), location=parse_location(data)),
            message="Punched in successfully",
        )

    @app.route("/api/attendance/punch-out", methods=["POST"], endpoint="attendance_punch_out")
    @login_required
    def punch_out():
        data = payload()
        return respond_with(
            lambda: service.punch_out(current_user_id(), location=parse_location(data)),
            message="Punched out successfully",
        )

    @app.route("/api/attendance/break/start", methods=["POST"], endpoint="attendance_break_start")
    @login_required
    def break_start():
        data = payload()
        return respond_with(
            service.start_break,
            current_user_id(),
            reason=data.get("reason"),
            message="Break started",
        )

    @app.route("/api/attendance/break/end", methods=["POST"], endpoint="attendance_break_end")
    @login_required
    def break_end():
        data = payload()
        return respond_with(
            service.end_break,
            current_user_id(),
            note=data.get("note"),
            message="Break ended",
        )

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        return respond_with(service.get_today, current_user_id())

    @app.route("/api/attendance/range", methods=["GET"], endpoint="attendance_range")
    @login_required
    def history():
        start = request.args.get("start_date")
        end = request.args.get("end_date")
        return respond_with(
            lambda: service.list_range(
                current_user_id(),
                start=parse_date_field(start, "start_date") if start else None,
                end=parse_date_field(end, "end_date") if end else None,
            )
        )

    @app.route("/api/attendance/breaks", methods=["GET"], endpoint="attendance_breaks")
    @login_required
    def breaks():
        raw = request.args.get("date")
        return respond_with(
            lambda: service.list_breaks(
                current_user_id(),
                parse_date_field(raw, "date") if raw else container.clock.today(),
            )
        )

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def summary():
        def _summary():
            user_id = current_user_id()
            if current_role() == Role.ADMIN:
                user_id = optional_int(request.args.get("user_id"), "user_id") or user_id
            today = container.clock.today()
            return service.monthly_summary(
                user_id,
                optional_int(request.args.get("year"), "year") or today.year,
                optional_int(request.args.get("month"), "month") or today.month,
            )

        return respond_with(_summary)
