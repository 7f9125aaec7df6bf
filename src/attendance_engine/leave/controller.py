from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_date_field
from ..common.validators import optional_int, parse_status_filter, require_non_empty, require_positive_id
from ..common.web import admin_required, current_role, current_user_id, login_required, payload, respond_with
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    service = container.leave_service
    accrual_job = container.leave_accrual_job

    @app.route("/api/leave/requests", methods=["POST"], endpoint="leave_submit")
    @login_required
    def submit():
        data = payload()
        return respond_with(
            lambda: service.submit_leave_request(
                user_id=current_user_id(),
                leave_type=data.get("leave_type", ""),
                start_date=parse_date_field(data.get("start_date"), "start_date"),
                end_date=parse_date_field(data.get("end_date"), "end_date"),
                reason=data.get("reason", ""),
                document_path=data.get("document_path"),
            ),
            message="Leave request submitted successfully",
        )

    @app.route("/api/leave/validate", methods=["POST"], endpoint="leave_validate")
    @login_required
    def validate():
        data = payload()
        return respond_with(
            lambda: service.validate_request(
                user_id=current_user_id(),
                leave_type=data.get("leave_type", ""),
                start_date=parse_date_field(data.get("start_date"), "start_date"),
                end_date=parse_date_field(data.get("end_date"), "end_date"),
            )
        )

    @app.route("/api/leave/requests", methods=["GET"], endpoint="leave_list")
    @login_required
    def list_requests():
        user_id = current_user_id()
        if current_role() == Role.ADMIN:
            raw = request.args.get("user_id")
            user_id = int(raw) if raw and raw.isdigit() else None
        return respond_with(
            lambda: service.list_requests(user_id=user_id, status=parse_status_filter(request.args.get("status")))
        )

    @app.route("/api/leave/balance", methods=["GET"], endpoint="leave_balance")
    @login_required
    def balance():
        return respond_with(
            lambda: service.get_balances(current_user_id(), year=optional_int(request.args.get("year"), "year"))
        )

    @app.route("/api/leave/policies", methods=["GET"], endpoint="leave_policies")
    @login_required
    def policies():
        return respond_with(service.list_policies, active_only=current_role() != Role.ADMIN)

    @app.route("/api/admin/leave/policies/<leave_type>", methods=["PUT"], endpoint="leave_policy_update")
    @admin_required
    def update_policy(leave_type: str):
        return respond_with(
            service.update_policy,
            current_role=current_role(),
            leave_type=leave_type,
            changes=payload(),
            message="Leave policy updated",
        )

    @app.route("/api/admin/leave/requests/<int:request_id>/approve", methods=["POST"], endpoint="leave_approve")
    @admin_required
    def approve(request_id: int):
        data = payload()
        return respond_with(
            service.approve_leave,
            current_role=current_role(),
            admin_user_id=current_user_id(),
            request_id=request_id,
            admin_remarks=data.get("remarks", ""),
            message="Leave request approved",
        )

    @app.route("/api/admin/leave/requests/<int:request_id>/reject", methods=["POST"], endpoint="leave_reject")
    @admin_required
    def reject(request_id: int):
        data = payload()
        return respond_with(
            service.reject_leave,
            current_role=current_role(),
            admin_user_id=current_user_id(),
            request_id=request_id,
            admin_remarks=data.get("remarks", ""),
            message="Leave request rejected",
        )

    @app.route("/api/admin/leave/balances", methods=["GET"], endpoint="leave_balances_all")
    @admin_required
    def all_balances():
        return respond_with(
            lambda: service.list_all_balances(
                current_role=current_role(),
                year=optional_int(request.args.get("year"), "year"),
            )
        )

    @app.route("/api/admin/leave/balances/adjust", methods=["POST"], endpoint="leave_balance_adjust")
    @admin_required
    def adjust():
        data = payload()
        return respond_with(
            lambda: service.adjust_balance(
                current_role=current_role(),
                admin_user_id=current_user_id(),
                user_id=require_positive_id(data.get("user_id"), "user_id"),
                leave_type=require_non_empty(data.get("leave_type"), "leave_type"),
                year=optional_int(data.get("year"), "year") or container.clock.today().year,
                adjustment=data.get("adjustment"),
                reason=data.get("reason", ""),
            ),
            message="Leave balance adjusted",
        )

    @app.route("/api/admin/leave/balances/initialize", methods=["POST"], endpoint="leave_balance_initialize")
    @admin_required
    def initialize():
        data = payload()
        return respond_with(
            lambda: service.initialize_balances(
                require_positive_id(data.get("user_id"), "user_id"),
                year=optional_int(data.get("year"), "year"),
            ),
            message="Leave balances initialized",
        )

    @app.route("/api/admin/leave/accrual/run", methods=["POST"], endpoint="leave_accrual_run")
    @admin_required
    def run_accrual():
        data = payload()
        return respond_with(
            lambda: accrual_job.run_monthly_accrual(
                year=optional_int(data.get("year"), "year"),
                month=optional_int(data.get("month"), "month"),
                actor_id=current_user_id(),
            ),
            message="Monthly leave accrual completed",
        )

    @app.route("/api/admin/leave/carry-forward/run", methods=["POST"], endpoint="leave_carry_forward_run")
    @admin_required
    def run_carry_forward():
        data = payload()
        return respond_with(
            lambda: service.run_carry_forward(
                current_role=current_role(),
                admin_user_id=current_user_id(),
                from_year=optional_int(data.get("from_year"), "from_year") or container.clock.today().year - 1,
            ),
            message="Carry forward completed",
        )
