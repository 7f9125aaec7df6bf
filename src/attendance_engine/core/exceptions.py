from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "authorization_error"


class StateConflictError(DomainError):
    """The requested transition does not apply to the current state.

    ``current_state`` is surfaced to callers so a UI can resynchronize.
    """

    code = "state_conflict"
    default_message = "Operation conflicts with the current state"

    def __init__(self, message: Optional[str] = None, *, current_state: Any = None):
        super().__init__(message or self.default_message)
        self.current_state = current_state


class AlreadyActiveSession(StateConflictError):
    code = "already_active_session"
    default_message = "Already punched in. Please punch out first."


class NoActiveSession(StateConflictError):
    code = "no_active_session"
    default_message = "No active punch in found"


class DayAlreadyClosed(StateConflictError):
    code = "day_already_closed"
    default_message = "Attendance for this day is already punched out"


class NotPunchedIn(StateConflictError):
    code = "not_punched_in"
    default_message = "You must be punched in to start a break"


class BreakAlreadyActive(StateConflictError):
    code = "break_already_active"
    default_message = "You already have an active break"


class NoActiveBreak(StateConflictError):
    code = "no_active_break"
    default_message = "No active break found"


class CorrectionAlreadyPending(StateConflictError):
    code = "correction_already_pending"
    default_message = "Correction request already exists for this date"


class RequestAlreadyDecided(StateConflictError):
    code = "request_already_decided"
    default_message = "Request has already been processed"


class PolicyViolationError(DomainError):
    """A leave policy rule rejected the request; ``reason`` is shown verbatim."""

    code = "policy_violation"

    def __init__(self, reason: str, *, rule: str = "policy"):
        super().__init__(reason)
        self.reason = reason
        self.rule = rule


class PolicyNotFoundError(PolicyViolationError):
    code = "policy_not_found"

    def __init__(self, reason: str = "Leave policy not found for this leave type"):
        super().__init__(reason, rule="policy_not_found")


class NotFoundError(DomainError):
    code = "not_found"


class ConfigurationError(DomainError):
    """A settings row is missing or malformed; callers fall back to defaults."""

    code = "configuration_error"


class StorageError(DomainError):
    code = "storage_error"


class TransientStorageError(StorageError):
    """Lock wait timeout, deadlock or lost connection: safe to retry."""

    code = "transient_storage_error"
