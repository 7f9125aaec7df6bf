import threading
from datetime import date
from decimal import Decimal

from attendance_engine.core.enums import AttendanceStatus, NotificationKind
from attendance_engine.scheduler.jobs import (
    SKIP_ALREADY_CLOSED,
    SKIP_ALREADY_PUNCHED_IN,
    SKIP_HOLIDAY,
    SKIP_NOT_PUNCHED_IN,
    SKIP_ON_LEAVE,
    SKIP_WEEK_OFF,
)

from engine_fakes import RecordingNotifier, at, build_engine

MONDAY = date(2024, 3, 4)
SATURDAY = date(2024, 3, 9)


def test_auto_punch_in_at_standard_start():
    e = build_engine(now=at(9, 15))

    outcome = e.jobs.auto_punch_in(1)

    assert outcome.performed
    rec = e.attendance.get_for_user_and_date(1, MONDAY)
    assert rec.punch_in == at(9, 0)
    assert rec.is_auto_punch_in
    (event,) = e.notifier.events
    assert event[0] == 1 and event[1] == NotificationKind.AUTO_PUNCH_IN


def test_auto_punch_in_skips_approved_leave_without_notifying():
    e = build_engine(now=at(9, 15))
    e.leave_requests.add_approved(1, "annual", date(2024, 3, 4), date(2024, 3, 5))

    outcome = e.jobs.auto_punch_in(1)

    assert not outcome.performed
    assert outcome.skipped_reason == SKIP_ON_LEAVE
    assert e.attendance.get_for_user_and_date(1, MONDAY) is None
    assert e.notifier.events == []


def test_auto_punch_in_skips_weekends_and_holidays():
    e = build_engine(now=at(9, 15, day=SATURDAY))
    assert e.jobs.auto_punch_in(1).skipped_reason == SKIP_WEEK_OFF

    e.holidays.create(holiday_date=MONDAY, name="Holi", holiday_type="public", created_by=99)
    assert e.jobs.auto_punch_in(1, MONDAY).skipped_reason == SKIP_HOLIDAY
    assert e.attendance.rows == {}


def test_auto_punch_in_leaves_manual_punch_alone():
    e = build_engine(now=at(8, 40))
    e.attendance_service.punch_in(1)
    e.clock.current = at(9, 15)

    assert e.jobs.auto_punch_in(1).skipped_reason == SKIP_ALREADY_PUNCHED_IN
    assert e.attendance.get_for_user_and_date(1, MONDAY).punch_in == at(8, 40)


def test_auto_punch_out_closes_open_session_at_standard_end():
    e = build_engine(now=at(9, 0))
    e.attendance_service.punch_in(1)
    e.clock.current = at(18, 30)

    outcome = e.jobs.auto_punch_out(1)

    rec = outcome.record
    assert rec.punch_out == at(18, 0)
    assert rec.is_auto_punch_out
    assert rec.total_hours == Decimal("9.00")
    assert rec.status == AttendanceStatus.PRESENT
    assert e.notifier.events[-1][1] == NotificationKind.AUTO_PUNCH_OUT


def test_auto_punch_out_never_ends_before_punch_in():
    e = build_engine(now=at(18, 20))
    e.attendance_service.punch_in(1)
    e.clock.current = at(18, 30)

    rec = e.jobs.auto_punch_out(1).record

    assert rec.punch_out == at(18, 20)
    assert rec.total_hours == Decimal("0.00")
    assert rec.status == AttendanceStatus.PENDING


def test_auto_punch_out_skips():
    e = build_engine(now=at(9, 0))
    assert e.jobs.auto_punch_out(1).skipped_reason == SKIP_NOT_PUNCHED_IN

    e.attendance_service.punch_in(1)
    e.clock.current = at(17, 0)
    e.attendance_service.punch_out(1)
    assert e.jobs.auto_punch_out(1).skipped_reason == SKIP_ALREADY_CLOSED


def test_notification_failure_does_not_undo_the_punch():
    e = build_engine(now=at(9, 15), notifier=RecordingNotifier(fail=True))

    outcome = e.jobs.auto_punch_in(1)

    assert outcome.performed
    assert e.attendance.get_for_user_and_date(1, MONDAY).punch_in == at(9, 0)


def test_sweep_counts_each_employee():
    e = build_engine(now=at(9, 15))
    e.leave_requests.add_approved(1, "annual", MONDAY, MONDAY)

    result = e.jobs.run_auto_punch_in()

    assert (result.processed, result.succeeded, result.skipped, result.failed) == (2, 1, 1, 0)


def test_sweep_isolates_failures_and_honours_cancel():
    e = build_engine(now=at(9, 15))
    e.attendance.rows[99] = None  # corrupt row makes lookups raise for everyone

    result = e.jobs.run_auto_punch_in()
    assert result.failed == 2 and result.processed == 2

    cancel = threading.Event()
    cancel.set()
    stopped = e.jobs.run_auto_punch_in(cancel_event=cancel)
    assert stopped.cancelled and stopped.processed == 0


def test_auto_punch_out_waits_for_a_break_started_after_standard_end():
    e = build_engine(now=at(9, 0))
    e.attendance_service.punch_in(1)
    e.clock.current = at(18, 10)
    brk = e.attendance_service.start_break(1)
    e.clock.current = at(18, 30)

    rec = e.jobs.auto_punch_out(1, MONDAY).record

    closed = e.breaks.rows[brk.break_id]
    assert closed.end == at(18, 10)
    assert closed.end >= closed.start
    assert closed.duration_minutes == 0
    assert rec.punch_out == at(18, 10)
    assert rec.total_hours == Decimal("9.17")
