from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ...calendars.model import AttendanceSettings, DayClassification
from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class StatusStrategy(ABC):
    """Strategy Pattern: encapsulate how a day's status is decided."""

    @abstractmethod
    def decide(self, *, total_hours: Optional[Decimal], day: DayClassification, settings: AttendanceSettings) -> StatusDecision:
        raise NotImplementedError
