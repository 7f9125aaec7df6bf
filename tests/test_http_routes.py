from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from flask import Flask

from attendance_engine.attendance.controller import register as register_attendance
from attendance_engine.calendars.controller import register as register_calendars
from attendance_engine.corrections.controller import register as register_corrections
from attendance_engine.leave.controller import register as register_leave

from engine_fakes import at, build_engine


@pytest.fixture
def engine():
    return build_engine(now=at(9, 0))


@pytest.fixture
def client(engine):
    app = Flask(__name__)
    app.secret_key = "test"
    container = SimpleNamespace(
        clock=engine.clock,
        attendance_service=engine.attendance_service,
        correction_service=engine.correction_service,
        holiday_service=engine.holiday_service,
        settings_service=engine.settings_service,
        leave_service=engine.leave_service,
        leave_accrual_job=engine.accrual_job,
    )
    for register in (register_attendance, register_calendars, register_corrections, register_leave):
        register(app, container)
    return app.test_client()


def _login(client, user_id=1, role="employee"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def test_requires_login(client):
    resp = client.post("/api/attendance/punch-in")
    assert resp.status_code == 401


def test_punch_cycle_over_http(client, engine):
    _login(client)

    resp = client.post("/api/attendance/punch-in", json={"latitude": "12.97", "longitude": "77.59"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["state"] == "open"

    again = client.post("/api/attendance/punch-in", json={})
    assert again.status_code == 409
    assert again.get_json()["current_state"] == "open"

    engine.clock.current = at(17, 0)
    out = client.post("/api/attendance/punch-out", json={}).get_json()
    assert out["data"]["total_hours"] == 8.0
    assert out["data"]["status"] == "present"


def test_bad_coordinates_are_a_400(client):
    _login(client)
    resp = client.post("/api/attendance/punch-in", json={"latitude": "north"})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "validation_error"


def test_leave_policy_violation_carries_rule(client, engine):
    engine.balances.ensure(1, "annual", 2024, Decimal("12.00"))
    _login(client)

    resp = client.post(
        "/api/leave/requests",
        json={"leave_type": "annual", "start_date": "2024-03-05", "end_date": "2024-03-05", "reason": "trip"},
    )

    body = resp.get_json()
    assert resp.status_code == 400
    assert body["rule"] == "notice_period"
    assert body["message"] == "Minimum notice period for annual leave is 7 days"


def test_admin_routes_check_role(client, engine):
    _login(client, role="employee")
    assert client.post("/api/admin/leave/accrual/run", json={"year": 2024, "month": 3}).status_code == 403

    _login(client, user_id=99, role="admin")
    resp = client.post("/api/admin/leave/accrual/run", json={"year": 2024, "month": 3})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["entries_accrued"] == 6


def test_holiday_listing(client, engine):
    engine.holidays.create(holiday_date=date(2024, 3, 25), name="Holi", holiday_type="public", created_by=99)
    _login(client)

    data = client.get("/api/attendance/holidays?start_date=2024-03-01&end_date=2024-03-31").get_json()["data"]

    assert [h["name"] for h in data] == ["Holi"]


def test_monthly_summary_defaults_to_current_month(client, engine):
    engine.attendance_service.punch_in(1)
    engine.clock.current = at(17, 0)
    engine.attendance_service.punch_out(1)
    _login(client)

    body = client.get("/api/attendance/summary").get_json()

    assert body["data"]["start_date"] == "2024-03-01"
    assert body["data"]["present"] == 1
    assert body["data"]["present_percentage"] == 100


def test_only_admins_read_another_users_summary(client, engine):
    engine.attendance_service.punch_in(2)
    _login(client, user_id=1)
    assert client.get("/api/attendance/summary?user_id=2").get_json()["data"]["user_id"] == 1

    _login(client, user_id=99, role="admin")
    data = client.get("/api/attendance/summary?user_id=2&year=2024&month=3").get_json()["data"]
    assert (data["user_id"], data["pending"], data["total_days"]) == (2, 1, 1)

    assert client.get("/api/attendance/summary?month=13").status_code == 400


def test_admin_reads_every_employees_balances(client, engine):
    engine.balances.ensure(1, "annual", 2024, Decimal("12.00"))
    _login(client, role="employee")
    assert client.get("/api/admin/leave/balances").status_code == 403

    _login(client, user_id=99, role="admin")
    data = client.get("/api/admin/leave/balances?year=2024").get_json()["data"]

    assert [row["full_name"] for row in data] == ["Asha Rao", "Vikram Nair"]
    annual = next(b for b in data[0]["balances"] if b["leave_type"] == "annual")
    assert annual["remaining"] == 12.0
