import importlib

import pytest

from attendance_engine.config import get_settings_module


@pytest.mark.parametrize(
    "env,module",
    [
        ("production", "attendance_engine.config.production"),
        ("PROD", "attendance_engine.config.production"),
        ("testing", "attendance_engine.config.testing"),
        ("anything", "attendance_engine.config.development"),
    ],
)
def test_app_env_selects_module(monkeypatch, env, module):
    monkeypatch.setenv("APP_ENV", env)
    assert get_settings_module() == module


def test_testing_settings_keep_scheduler_off():
    settings = importlib.import_module("attendance_engine.config.testing")
    assert settings.SCHEDULER_ENABLED is False
    assert settings.ORG_TIMEZONE == "Asia/Kolkata"
