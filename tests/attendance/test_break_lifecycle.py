from datetime import date

import pytest

from attendance_engine.core.enums import BreakStatus
from attendance_engine.core.exceptions import BreakAlreadyActive, NoActiveBreak, NotPunchedIn

from engine_fakes import at, build_engine


def test_break_requires_open_session():
    e = build_engine(now=at(10, 0))
    with pytest.raises(NotPunchedIn):
        e.attendance_service.start_break(1)


def test_only_one_active_break():
    e = build_engine(now=at(9, 0))
    e.attendance_service.punch_in(1)
    e.clock.current = at(11, 0)
    e.attendance_service.start_break(1, reason="tea")

    with pytest.raises(BreakAlreadyActive):
        e.attendance_service.start_break(1)
    assert len(e.breaks.rows) == 1


def test_end_break_without_active_break():
    e = build_engine(now=at(9, 0))
    e.attendance_service.punch_in(1)
    with pytest.raises(NoActiveBreak):
        e.attendance_service.end_break(1)


def test_end_break_records_duration_and_running_total():
    e = build_engine(now=at(9, 0))
    e.attendance_service.punch_in(1)
    e.clock.current = at(11, 0)
    e.attendance_service.start_break(1)
    e.clock.current = at(11, 15)
    closed = e.attendance_service.end_break(1, note="back")

    assert closed.duration_minutes == 15
    assert closed.status == BreakStatus.COMPLETED
    assert closed.note == "back"
    assert e.attendance.get_for_user_and_date(1, date(2024, 3, 4)).break_minutes == 15


def test_punch_out_force_closes_active_break():
    e = build_engine(now=at(9, 0))
    e.attendance_service.punch_in(1)
    e.clock.current = at(16, 0)
    e.attendance_service.start_break(1)
    e.clock.current = at(16, 30)
    rec = e.attendance_service.punch_out(1)

    (only_break,) = e.breaks.rows.values()
    assert only_break.status == BreakStatus.COMPLETED
    assert only_break.end == at(16, 30)
    assert only_break.duration_minutes == 30
    assert rec.break_minutes == 30
    assert e.breaks.get_active_for_user(1) is None


def test_punch_in_closes_a_lingering_break():
    e = build_engine(now=at(9, 0))
    rec = e.attendance_service.punch_in(1)
    e.breaks.create(attendance_id=rec.attendance_id, user_id=2, start=at(8, 30), reason=None)

    e.attendance_service.punch_in(2)

    lingering = e.breaks.rows[1]
    assert lingering.status == BreakStatus.COMPLETED
    assert lingering.duration_minutes == 30
