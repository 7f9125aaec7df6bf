from datetime import date
from decimal import Decimal

import pytest

from attendance_engine.core.exceptions import ValidationError
from attendance_engine.leave.model import LeavePolicy
from attendance_engine.leave.policy_engine import (
    RULE_INSUFFICIENT_BALANCE,
    RULE_MAX_CONSECUTIVE,
    RULE_NOTICE_PERIOD,
    RULE_OVERLAP,
    RULE_POLICY_NOT_FOUND,
    format_days,
    leave_days_between,
)

from engine_fakes import build_engine

TODAY = date(2024, 3, 4)


def _engine_with_balance(days="12.00", policies=None):
    e = build_engine(policies=policies)
    e.balances.ensure(1, "annual", 2024, Decimal(days))
    return e


def test_leave_days_are_inclusive():
    assert leave_days_between(date(2024, 3, 11), date(2024, 3, 11)) == 1
    assert leave_days_between(date(2024, 3, 11), date(2024, 3, 20)) == 10


@pytest.mark.parametrize("value,text", [(Decimal("12.00"), "12"), (Decimal("2.50"), "2.5"), (Decimal("10"), "10")])
def test_format_days(value, text):
    assert format_days(value) == text


def test_max_consecutive_days_rejects_long_request():
    e = _engine_with_balance(policies=[LeavePolicy("annual", Decimal("12.00"), max_consecutive_days=7)])

    result = e.policy_engine.validate_request(1, "annual", date(2024, 3, 11), date(2024, 3, 20), today=TODAY)

    assert not result.valid
    assert result.rule == RULE_MAX_CONSECUTIVE
    assert result.reason == "Maximum consecutive leave days for annual is 7"
    assert result.leave_days == 10


def test_max_consecutive_days_boundary_is_allowed():
    e = _engine_with_balance(policies=[LeavePolicy("annual", Decimal("12.00"), max_consecutive_days=7)])
    result = e.policy_engine.validate_request(1, "annual", date(2024, 3, 11), date(2024, 3, 17), today=TODAY)
    assert result.valid and result.leave_days == 7


def test_zero_max_consecutive_means_unlimited():
    e = _engine_with_balance(days="30.00", policies=[LeavePolicy("annual", Decimal("30.00"))])
    result = e.policy_engine.validate_request(1, "annual", date(2024, 3, 11), date(2024, 4, 5), today=TODAY)
    assert result.valid


def test_notice_period():
    e = _engine_with_balance()

    short = e.policy_engine.validate_request(1, "annual", date(2024, 3, 8), date(2024, 3, 8), today=TODAY)
    assert short.rule == RULE_NOTICE_PERIOD
    assert short.reason == "Minimum notice period for annual leave is 7 days"

    exact = e.policy_engine.validate_request(1, "annual", date(2024, 3, 11), date(2024, 3, 11), today=TODAY)
    assert exact.valid


def test_insufficient_balance_message():
    e = _engine_with_balance(days="2.50")

    result = e.policy_engine.validate_request(1, "annual", date(2024, 3, 11), date(2024, 3, 13), today=TODAY)

    assert result.rule == RULE_INSUFFICIENT_BALANCE
    assert result.reason == "Insufficient leave balance. Available: 2.5 days, Requested: 3 days"


def test_missing_balance_row_counts_as_zero():
    e = build_engine()
    result = e.policy_engine.validate_request(1, "annual", date(2024, 3, 11), date(2024, 3, 11), today=TODAY)
    assert result.reason == "Insufficient leave balance. Available: 0 days, Requested: 1 days"


def test_overlap_with_approved_leave():
    e = _engine_with_balance()
    e.leave_requests.add_approved(1, "annual", date(2024, 3, 12), date(2024, 3, 13))

    result = e.policy_engine.validate_request(1, "annual", date(2024, 3, 13), date(2024, 3, 14), today=TODAY)

    assert result.rule == RULE_OVERLAP
    assert result.reason == "Leave request overlaps with existing approved leave"


def test_unknown_or_inactive_policy():
    e = build_engine(policies=[LeavePolicy("annual", Decimal("12.00"), is_active=False)])
    for leave_type in ("annual", "unpaid"):
        result = e.policy_engine.validate_request(1, leave_type, date(2024, 3, 11), date(2024, 3, 11), today=TODAY)
        assert result.rule == RULE_POLICY_NOT_FOUND


def test_inverted_range_is_a_validation_error():
    e = build_engine()
    with pytest.raises(ValidationError):
        e.policy_engine.validate_request(1, "annual", date(2024, 3, 12), date(2024, 3, 11), today=TODAY)


def test_compute_balance_zero_fills_active_policies():
    e = _engine_with_balance()
    rows = {row.leave_type: row for row in e.policy_engine.compute_balance(1, 2024)}

    assert set(rows) == {"annual", "sick", "casual", "maternity", "paternity"}
    assert rows["annual"].remaining == Decimal("12.00")
    assert rows["sick"].allocated == Decimal("0.00")
