from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class CorrectionRequest:
    """Employee request to fix a day's punch times; an admin decides it."""

    correction_id: int
    user_id: int
    work_date: date
    requested_punch_in: Optional[datetime]
    requested_punch_out: Optional[datetime]
    reason: str
    status: RequestStatus = RequestStatus.PENDING
    document_path: Optional[str] = None
    admin_remarks: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
