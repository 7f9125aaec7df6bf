import threading
from datetime import date
from decimal import Decimal

from attendance_engine.core.enums import NotificationKind

from engine_fakes import at, build_engine

MONDAY = date(2024, 3, 4)


def _take_break(e, user_id, start, end):
    e.clock.current = start
    e.attendance_service.start_break(user_id)
    e.clock.current = end
    e.attendance_service.end_break(user_id)


def _punched_in(*user_ids):
    e = build_engine(now=at(9, 0))
    for user_id in user_ids:
        e.attendance_service.punch_in(user_id)
    return e


def test_warns_when_completed_breaks_exceed_two_hours():
    e = _punched_in(1)
    _take_break(e, 1, at(10, 0), at(11, 0))
    _take_break(e, 1, at(13, 0), at(14, 15))

    usage = e.jobs.check_break_usage(1, MONDAY)

    assert usage.exceeded and usage.break_minutes == 135
    (event,) = e.notifier.events
    user_id, kind, details = event
    assert (user_id, kind) == (1, NotificationKind.EXCESSIVE_BREAK)
    assert details["break_minutes"] == 135
    assert details["break_hours"] == Decimal("2.3")
    assert details["limit_minutes"] == 120
    assert details["work_date"] == MONDAY


def test_exactly_two_hours_is_within_the_allowance():
    e = _punched_in(1)
    _take_break(e, 1, at(10, 0), at(12, 0))

    usage = e.jobs.check_break_usage(1, MONDAY)

    assert usage.break_minutes == 120
    assert not usage.exceeded
    assert e.notifier.events == []


def test_break_still_running_is_not_counted():
    e = _punched_in(1)
    _take_break(e, 1, at(10, 0), at(11, 0))
    e.clock.current = at(11, 30)
    e.attendance_service.start_break(1)
    e.clock.current = at(14, 0)

    assert e.jobs.check_break_usage(1, MONDAY).break_minutes == 60
    assert e.notifier.events == []


def test_no_record_means_no_break_time():
    e = build_engine(now=at(12, 0))

    usage = e.jobs.check_break_usage(2)

    assert usage.break_minutes == 0 and not usage.exceeded


def test_sweep_counts_warnings_as_succeeded():
    e = _punched_in(1, 2)
    _take_break(e, 1, at(9, 30), at(12, 0))
    _take_break(e, 2, at(12, 0), at(12, 30))

    result = e.jobs.run_break_monitoring(MONDAY)

    assert (result.processed, result.succeeded, result.skipped, result.failed) == (2, 1, 1, 0)
    assert [event[0] for event in e.notifier.events] == [1]


def test_sweep_isolates_failures_and_honours_cancel():
    e = build_engine(now=at(12, 0))
    e.attendance.rows[99] = None  # corrupt row makes lookups raise for everyone

    result = e.jobs.run_break_monitoring(MONDAY)
    assert result.failed == 2 and len(result.errors) == 2

    cancel = threading.Event()
    cancel.set()
    assert e.jobs.run_break_monitoring(MONDAY, cancel_event=cancel).cancelled
