import threading
import time
from datetime import date, datetime
from decimal import Decimal

import pytest

from attendance_engine.attendance.model import Location
from attendance_engine.core.enums import AttendanceStatus, SessionState
from attendance_engine.core.exceptions import AlreadyActiveSession, DayAlreadyClosed, NoActiveSession, ValidationError

from engine_fakes import at, build_engine


def test_punch_in_then_out_computes_hours_and_status():
    e = build_engine(now=at(9, 5))
    rec = e.attendance_service.punch_in(1)
    assert rec.state == SessionState.OPEN
    assert rec.status == AttendanceStatus.PENDING

    e.clock.current = at(17, 35)
    rec = e.attendance_service.punch_out(1)

    assert rec.state == SessionState.CLOSED
    assert rec.total_hours == Decimal("8.50")
    assert rec.status == AttendanceStatus.PRESENT
    assert e.attendance.get_for_user_and_date(1, date(2024, 3, 4)).total_hours == Decimal("8.50")


def test_break_is_subtracted_from_production_hours():
    e = build_engine(now=at(9, 0))
    svc = e.attendance_service
    svc.punch_in(1)
    e.clock.current = at(13, 0)
    svc.start_break(1)
    e.clock.current = at(13, 40)
    svc.end_break(1)
    e.clock.current = at(16, 30)
    rec = svc.punch_out(1)

    assert rec.total_hours == Decimal("7.50")
    assert rec.break_minutes == 40
    assert rec.production_hours == Decimal("6.83")
    assert rec.status == AttendanceStatus.PRESENT


def test_second_punch_in_is_rejected_with_current_state():
    e = build_engine(now=at(9, 0))
    e.attendance_service.punch_in(1)

    with pytest.raises(AlreadyActiveSession) as exc:
        e.attendance_service.punch_in(1)
    assert exc.value.current_state == SessionState.OPEN
    assert len(e.attendance.rows) == 1


def test_punch_out_without_session_is_rejected():
    e = build_engine(now=at(18, 0))
    with pytest.raises(NoActiveSession) as exc:
        e.attendance_service.punch_out(1)
    assert exc.value.current_state == SessionState.NONE


def test_closed_day_cannot_be_reopened():
    e = build_engine(now=at(9, 0))
    e.attendance_service.punch_in(1)
    e.clock.current = at(17, 0)
    e.attendance_service.punch_out(1)

    e.clock.current = at(17, 30)
    with pytest.raises(DayAlreadyClosed):
        e.attendance_service.punch_in(1)


def test_open_session_across_midnight_is_closed_on_its_own_date():
    e = build_engine(now=at(22, 0))
    e.attendance_service.punch_in(1)

    e.clock.current = datetime(2024, 3, 5, 2, 0)
    rec = e.attendance_service.punch_out(1)

    assert rec.work_date == date(2024, 3, 4)
    assert rec.total_hours == Decimal("4.00")
    assert rec.status == AttendanceStatus.ABSENT


def test_weekend_work_is_week_off():
    saturday = date(2024, 3, 9)
    e = build_engine(now=at(9, 0, day=saturday))
    e.attendance_service.punch_in(1)
    e.clock.current = at(18, 0, day=saturday)
    assert e.attendance_service.punch_out(1).status == AttendanceStatus.WEEK_OFF


def test_locations_are_kept_on_the_record():
    e = build_engine(now=at(9, 0))
    e.attendance_service.punch_in(1, location=Location(Decimal("12.97"), Decimal("77.59"), "HQ"))
    e.clock.current = at(17, 0)
    rec = e.attendance_service.punch_out(1, location=Location(address="Client site"))

    assert rec.punch_in_location.address == "HQ"
    assert rec.punch_out_location.address == "Client site"


def test_every_transition_takes_the_user_lock():
    e = build_engine(now=at(9, 0))
    e.attendance_service.punch_in(2)
    assert e.lock.holds == [2]


def test_concurrent_punch_ins_open_exactly_one_session():
    e = build_engine(now=at(9, 0))
    lookup = e.attendance.get_open_for_user

    def slow_lookup(user_id):
        found = lookup(user_id)
        time.sleep(0.05)
        return found

    e.attendance.get_open_for_user = slow_lookup
    start = threading.Barrier(2)
    outcomes = []

    def worker():
        start.wait()
        try:
            e.attendance_service.punch_in(1)
            outcomes.append("ok")
        except AlreadyActiveSession:
            outcomes.append("conflict")

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert sorted(outcomes) == ["conflict", "ok"]
    assert len(e.attendance.rows) == 1


def test_today_snapshot_reports_state_and_active_break():
    e = build_engine(now=at(9, 0))
    assert e.attendance_service.get_today(1).state == SessionState.NONE

    e.attendance_service.punch_in(1)
    e.clock.current = at(11, 0)
    e.attendance_service.start_break(1)

    snap = e.attendance_service.get_today(1)
    assert snap.state == SessionState.OPEN
    assert snap.active_break is not None


def test_list_range_rejects_inverted_dates():
    e = build_engine()
    with pytest.raises(ValidationError):
        e.attendance_service.list_range(1, start=date(2024, 3, 5), end=date(2024, 3, 1))
