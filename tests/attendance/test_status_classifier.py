from datetime import date, datetime
from decimal import Decimal

import pytest

from attendance_engine.attendance.classifier import (
    classify_status,
    compute_break_minutes,
    compute_production_hours,
    compute_total_hours,
)
from attendance_engine.attendance.factory import StatusStrategyFactory
from attendance_engine.attendance.strategies.holiday_strategy import HolidayStrategy
from attendance_engine.attendance.strategies.week_off_strategy import WeekOffStrategy
from attendance_engine.attendance.strategies.worked_hours_strategy import WorkedHoursStrategy
from attendance_engine.calendars.model import AttendanceSettings, DayClassification
from attendance_engine.core.enums import AttendanceStatus

WORKDAY = DayClassification(work_date=date(2024, 3, 4))
SETTINGS = AttendanceSettings()


def test_total_hours_rounds_to_two_places():
    assert compute_total_hours(datetime(2024, 3, 4, 9, 5), datetime(2024, 3, 4, 17, 35)) == Decimal("8.50")
    assert compute_total_hours(datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 9, 20)) == Decimal("0.33")


def test_total_hours_missing_punch_is_none():
    assert compute_total_hours(datetime(2024, 3, 4, 9, 0), None) is None


def test_break_minutes_round_half_up_and_never_negative():
    start = datetime(2024, 3, 4, 13, 0, 0)
    assert compute_break_minutes(start, datetime(2024, 3, 4, 13, 0, 30)) == 1
    assert compute_break_minutes(start, datetime(2024, 3, 4, 13, 0, 29)) == 0
    assert compute_break_minutes(start, datetime(2024, 3, 4, 12, 50)) == 0


def test_production_hours_subtracts_breaks_and_floors_at_zero():
    assert compute_production_hours(Decimal("7.50"), 40) == Decimal("6.83")
    assert compute_production_hours(Decimal("0.50"), 60) == Decimal("0.00")
    assert compute_production_hours(None, 10) is None


@pytest.mark.parametrize(
    "hours, expected",
    [
        (Decimal("7.50"), AttendanceStatus.PRESENT),
        (Decimal("7.49"), AttendanceStatus.HALF_DAY),
        (Decimal("7.00"), AttendanceStatus.HALF_DAY),
        (Decimal("6.99"), AttendanceStatus.ABSENT),
        (Decimal("0.01"), AttendanceStatus.ABSENT),
        (Decimal("0"), AttendanceStatus.PENDING),
        (None, AttendanceStatus.PENDING),
    ],
)
def test_working_day_thresholds(hours, expected):
    assert classify_status(hours, WORKDAY, SETTINGS) == expected


def test_week_off_wins_over_holiday_and_hours():
    day = DayClassification(work_date=date(2024, 3, 9), is_weekend=True, is_holiday=True)
    assert classify_status(Decimal("9"), day, SETTINGS) == AttendanceStatus.WEEK_OFF


def test_holiday_wins_over_hours():
    day = DayClassification(work_date=date(2024, 3, 25), is_holiday=True, holiday_name="Holi")
    assert classify_status(Decimal("9"), day, SETTINGS) == AttendanceStatus.HOLIDAY


def test_classification_is_deterministic():
    results = {classify_status(Decimal("7.2"), WORKDAY, SETTINGS) for _ in range(20)}
    assert results == {AttendanceStatus.HALF_DAY}


def test_custom_thresholds_are_respected():
    settings = AttendanceSettings(full_day_hours=Decimal("8"), half_day_hours=Decimal("4"))
    assert classify_status(Decimal("7.9"), WORKDAY, settings) == AttendanceStatus.HALF_DAY
    assert classify_status(Decimal("4"), WORKDAY, settings) == AttendanceStatus.HALF_DAY


def test_factory_picks_strategy_by_day_kind():
    factory = StatusStrategyFactory()
    assert isinstance(factory.for_day(DayClassification(date(2024, 3, 9), is_weekend=True)), WeekOffStrategy)
    assert isinstance(factory.for_day(DayClassification(date(2024, 3, 25), is_holiday=True)), HolidayStrategy)
    assert isinstance(factory.for_day(WORKDAY), WorkedHoursStrategy)
