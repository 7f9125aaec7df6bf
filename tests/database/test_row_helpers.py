from datetime import datetime
from decimal import Decimal

from attendance_engine.core.enums import AttendanceStatus
from attendance_engine.database.mysql_base import from_json, to_bool, to_json


def test_audit_snapshot_json_round_trip():
    snapshot = {
        "punch_in_time": datetime(2024, 3, 4, 9, 0),
        "total_hours": Decimal("8.50"),
        "status": AttendanceStatus.PRESENT,
    }

    text = to_json(snapshot)

    assert from_json(text) == {
        "punch_in_time": "2024-03-04 09:00:00",
        "status": "present",
        "total_hours": "8.50",
    }


def test_empty_values():
    assert to_json(None) is None
    assert from_json("") is None
    assert from_json({"a": 1}) == {"a": 1}
    assert to_bool(None) is False
    assert to_bool(1) is True
