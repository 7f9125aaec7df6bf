from concurrent.futures import ThreadPoolExecutor
from types import SimpleNamespace

from attendance_engine import main

from engine_fakes import build_engine


def test_create_app_hands_a_shared_executor_to_the_container(monkeypatch):
    e = build_engine()
    captured = {}
    shutdown_hooks = []

    def fake_build_container(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(
            clock=e.clock,
            attendance_service=e.attendance_service,
            correction_service=e.correction_service,
            holiday_service=e.holiday_service,
            settings_service=e.settings_service,
            leave_service=e.leave_service,
            leave_accrual_job=e.accrual_job,
        )

    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setattr(main, "build_container", fake_build_container)
    monkeypatch.setattr(main, "apply_schema", lambda db_config: 0)
    monkeypatch.setattr(main.atexit, "register", lambda fn, *args, **kwargs: shutdown_hooks.append((fn, kwargs)))

    app = main.create_app()

    executor = captured["executor"]
    assert isinstance(executor, ThreadPoolExecutor)
    assert app.extensions["attendance_notify_executor"] is executor
    assert (executor.shutdown, {"wait": True}) in shutdown_hooks
    executor.shutdown(wait=True)
