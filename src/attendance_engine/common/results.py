"""Structured success/error results handed to collaborators.

Services raise ``DomainError`` subclasses; the outer surfaces (Flask
controllers, admin tooling) convert them here so callers never see raw
storage errors.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, is_dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional

from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    StateConflictError,
    TransientStorageError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    success: bool
    message: str = ""
    code: Optional[str] = None
    data: Any = None
    state: Any = None
    rule: Optional[str] = None
    http_status: int = 200

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.code:
            out["code"] = self.code
        if self.rule:
            out["rule"] = self.rule
        if self.data is not None:
            out["data"] = to_payload(self.data)
        if self.state is not None:
            out["current_state"] = to_payload(self.state)
        return out


def _status_for(exc: DomainError) -> int:
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, StateConflictError):
        return 409
    if isinstance(exc, TransientStorageError):
        return 503
    return 400


def ok(data: Any = None, message: str = "OK") -> OperationResult:
    return OperationResult(success=True, message=message, data=data)


def from_error(exc: DomainError) -> OperationResult:
    return OperationResult(
        success=False,
        message=str(exc),
        code=exc.code,
        state=getattr(exc, "current_state", None),
        rule=getattr(exc, "rule", None),
        http_status=_status_for(exc),
    )


def run_operation(fn: Callable[..., Any], *args, message: str = "OK", **kwargs) -> OperationResult:
    """Run a service call and fold domain errors into an ``OperationResult``."""
    try:
        return ok(fn(*args, **kwargs), message=message)
    except DomainError as e:
        if isinstance(e, TransientStorageError):
            logger.warning("Transient storage failure in %s: %s", getattr(fn, "__name__", fn), e)
        return from_error(e)


def to_payload(value: Any) -> Any:
    """JSON-friendly conversion for dataclasses, enums, decimals and dates."""
    if is_dataclass(value) and not isinstance(value, type):
        return to_payload(asdict(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(to_payload(k)): to_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_payload(v) for v in value]
    return value
