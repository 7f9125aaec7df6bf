from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import BreakRecord


class BreakRepository(Protocol):
    def get_active_for_user(self, user_id: int) -> Optional[BreakRecord]:
        raise NotImplementedError

    def list_for_record(self, attendance_id: int) -> Sequence[BreakRecord]:
        raise NotImplementedError

    def create(self, *, attendance_id: int, user_id: int, start: datetime, reason: Optional[str]) -> int:
        raise NotImplementedError

    def complete(self, *, break_id: int, end: datetime, duration_minutes: int, note: Optional[str]) -> None:
        raise NotImplementedError

    def total_minutes_for_record(self, attendance_id: int, *, since: Optional[datetime] = None) -> int:
        """Completed break minutes, ignoring breaks started before ``since``."""
        raise NotImplementedError
