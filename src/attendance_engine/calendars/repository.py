from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from .model import Holiday


class SettingsRepository(Protocol):
    def get_all(self) -> Mapping[str, str]:
        raise NotImplementedError

    def upsert(self, key: str, value: str) -> None:
        raise NotImplementedError


class HolidayRepository(Protocol):
    def get_by_date(self, holiday_date: date) -> Optional[Holiday]:
        raise NotImplementedError

    def list_range(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        raise NotImplementedError

    def create(self, *, holiday_date: date, name: str, holiday_type: str, created_by: Optional[int]) -> int:
        raise NotImplementedError

    def update(self, *, holiday_id: int, holiday_date: date, name: str, holiday_type: str) -> bool:
        raise NotImplementedError

    def delete(self, *, holiday_id: int) -> bool:
        raise NotImplementedError
