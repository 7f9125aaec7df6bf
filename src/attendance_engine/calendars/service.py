from __future__ import annotations

import logging
from datetime import date, time
from decimal import Decimal, InvalidOperation
from typing import Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_time_field
from ..common.validators import require_admin, require_non_empty
from ..core.constants import (
    SETTING_FULL_DAY_HOURS,
    SETTING_HALF_DAY_HOURS,
    SETTING_STANDARD_END,
    SETTING_STANDARD_START,
    SETTING_WEEKEND_DAYS,
    WEEKDAY_NAMES,
)
from ..core.enums import Role
from ..core.exceptions import ConfigurationError, NotFoundError, ValidationError
from .model import AttendanceSettings, DayClassification, Holiday
from .repository import HolidayRepository, SettingsRepository

logger = logging.getLogger(__name__)


def parse_hours_setting(raw: str, key: str) -> Decimal:
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise ConfigurationError(f"{key} is not a number: {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive: {raw!r}")
    return value


def parse_weekend_setting(raw: str, key: str = SETTING_WEEKEND_DAYS) -> frozenset:
    days = frozenset(d.strip().lower() for d in str(raw).split(",") if d.strip())
    unknown = days.difference(WEEKDAY_NAMES)
    if unknown:
        raise ConfigurationError(f"{key} has unknown day names: {sorted(unknown)}")
    return days


def parse_time_setting(raw: str, key: str) -> time:
    try:
        value = parse_time_field(raw, key)
    except ValidationError as e:
        raise ConfigurationError(str(e))
    if value is None:
        raise ConfigurationError(f"{key} is empty")
    return value


_PARSERS: Mapping[str, tuple[str, Callable[[str, str], object]]] = {
    SETTING_FULL_DAY_HOURS: ("full_day_hours", parse_hours_setting),
    SETTING_HALF_DAY_HOURS: ("half_day_hours", parse_hours_setting),
    SETTING_WEEKEND_DAYS: ("weekend_days", parse_weekend_setting),
    SETTING_STANDARD_START: ("standard_start", parse_time_setting),
    SETTING_STANDARD_END: ("standard_end", parse_time_setting),
}


class SettingsResolver:
    """Builds an ``AttendanceSettings`` snapshot from the settings table.

    A missing or malformed key keeps its default and logs a warning; one bad
    row never blocks punching.
    """

    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def resolve(self) -> AttendanceSettings:
        raw = self._settings.get_all()
        values: dict[str, object] = {}
        for key, (attr, parser) in _PARSERS.items():
            if key not in raw:
                logger.warning("Attendance setting %s missing, using default", key)
                continue
            try:
                values[attr] = parser(raw[key], key)
            except ConfigurationError as e:
                logger.warning("Attendance setting %s ignored: %s", key, e)

        resolved = AttendanceSettings(**values)
        if resolved.half_day_hours > resolved.full_day_hours:
            logger.warning(
                "half_day_hours (%s) exceeds full_day_hours (%s), using defaults for both",
                resolved.half_day_hours,
                resolved.full_day_hours,
            )
            values.pop("full_day_hours", None)
            values.pop("half_day_hours", None)
            resolved = AttendanceSettings(**values)
        return resolved


class CalendarResolver:
    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def classify(self, work_date: date, settings: AttendanceSettings) -> DayClassification:
        weekday = WEEKDAY_NAMES[work_date.weekday()]
        holiday = self._holidays.get_by_date(work_date)
        return DayClassification(
            work_date=work_date,
            is_weekend=weekday in settings.weekend_days,
            is_holiday=holiday is not None,
            holiday_name=holiday.name if holiday else None,
        )


class HolidayService:
    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def list_holidays(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        return self._holidays.list_range(start=start, end=end)

    def add_holiday(
        self,
        *,
        current_role: Role,
        actor_id: int,
        holiday_date: date,
        name: str,
        holiday_type: str = "company",
    ) -> int:
        require_admin(current_role)
        name = require_non_empty(name, "Holiday name")
        holiday_id = self._holidays.create(
            holiday_date=holiday_date,
            name=name,
            holiday_type=(holiday_type or "company").strip(),
            created_by=int(actor_id),
        )
        logger.info("Holiday %s set on %s by %s", name, holiday_date, actor_id)
        return holiday_id

    def update_holiday(
        self,
        *,
        current_role: Role,
        holiday_id: int,
        holiday_date: date,
        name: str,
        holiday_type: str = "company",
    ) -> None:
        require_admin(current_role)
        name = require_non_empty(name, "Holiday name")
        updated = self._holidays.update(
            holiday_id=int(holiday_id),
            holiday_date=holiday_date,
            name=name,
            holiday_type=(holiday_type or "company").strip(),
        )
        if not updated:
            raise NotFoundError("Holiday not found")

    def delete_holiday(self, *, current_role: Role, holiday_id: int) -> None:
        require_admin(current_role)
        if not self._holidays.delete(holiday_id=int(holiday_id)):
            raise NotFoundError("Holiday not found")
        logger.info("Holiday %s deleted", holiday_id)


class SettingsService:
    """Admin edits to the attendance_settings table."""

    def __init__(self, settings: SettingsRepository, resolver: SettingsResolver):
        self._settings = settings
        self._resolver = resolver

    def get_settings(self) -> AttendanceSettings:
        return self._resolver.resolve()

    def update_settings(self, *, current_role: Role, values: Mapping[str, object]) -> AttendanceSettings:
        require_admin(current_role)
        if not values:
            raise ValidationError("No settings provided")

        cleaned: dict[str, str] = {}
        for key, raw in values.items():
            if key not in _PARSERS:
                raise ValidationError(f"Unknown setting: {key}")
            text = ",".join(raw) if isinstance(raw, (list, tuple)) else str(raw).strip()
            try:
                _PARSERS[key][1](text, key)
            except ConfigurationError as e:
                raise ValidationError(str(e))
            cleaned[key] = text

        for key, text in cleaned.items():
            self._settings.upsert(key, text)
        logger.info("Attendance settings updated: %s", sorted(cleaned))
        return self._resolver.resolve()
