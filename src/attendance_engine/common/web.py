from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from flask import jsonify, request, session

from ..core.enums import Role
from .results import OperationResult, run_operation


def login_required(view):
    """Identity comes from the auth collaborator via the Flask session."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "code": "unauthenticated", "message": "Login required"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "code": "unauthenticated", "message": "Login required"}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "code": "authorization_error", "message": "Admin access required"}), 403
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        return Role.EMPLOYEE


def payload() -> dict:
    return request.get_json(silent=True) or request.form.to_dict() or {}


def respond(result: OperationResult):
    return jsonify(result.to_dict()), result.http_status


def respond_with(fn: Callable[..., Any], *args, message: str = "OK", **kwargs):
    return respond(run_operation(fn, *args, message=message, **kwargs))
