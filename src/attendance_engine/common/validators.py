from __future__ import annotations

from typing import Optional

from ..core.enums import RequestStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def require_positive_id(value, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")
    if parsed <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return parsed


def require_admin(role: Role) -> None:
    if role != Role.ADMIN:
        raise AuthorizationError("Admin access required")


def optional_int(value, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")


def parse_status_filter(value: Optional[str]) -> Optional[RequestStatus]:
    if not value:
        return None
    try:
        return RequestStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown status: {value}")
