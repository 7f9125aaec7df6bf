from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import CorrectionRequest


class CorrectionRepository(Protocol):
    def get(self, correction_id: int) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def has_pending(self, user_id: int, work_date: date) -> bool:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        requested_punch_in: Optional[datetime],
        requested_punch_out: Optional[datetime],
        reason: str,
        document_path: Optional[str],
    ) -> int:
        raise NotImplementedError

    def list_corrections(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        correction_id: int,
        status: RequestStatus,
        reviewed_by: int,
        admin_remarks: Optional[str],
        reviewed_at: datetime,
    ) -> bool:
        raise NotImplementedError
