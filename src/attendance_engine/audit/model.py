from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import AuditAction


@dataclass(frozen=True)
class AuditEntry:
    """Append-only record of an administrative change."""

    action: AuditAction
    actor_id: Optional[int]
    attendance_id: Optional[int] = None
    previous_value: Optional[Any] = None
    new_value: Optional[Any] = None
    reason: Optional[str] = None
    audit_id: Optional[int] = None
    created_at: Optional[datetime] = None
