from __future__ import annotations

import atexit
import importlib
import logging
from concurrent.futures import ThreadPoolExecutor

from dotenv import load_dotenv
from flask import Flask, jsonify

from .attendance.controller import register as register_attendance
from .calendars.controller import register as register_calendars
from .common.log import configure_logging
from .config import get_settings_module
from .container import build_container
from .core.constants import DEFAULT_TIMEZONE
from .corrections.controller import register as register_corrections
from .database.bootstrap import apply_schema
from .leave.controller import register as register_leave
from .scheduler.runner import build_scheduler

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    org_timezone = getattr(settings, "ORG_TIMEZONE", DEFAULT_TIMEZONE)

    logger.info(
        "settings=%s db=%s@%s:%s/%s tz=%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        org_timezone,
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config)

    # Notification delivery runs off the request thread.
    executor = ThreadPoolExecutor(
        max_workers=int(getattr(settings, "NOTIFY_WORKERS", 4)),
        thread_name_prefix="notify",
    )
    atexit.register(executor.shutdown, wait=True)
    app.extensions["attendance_notify_executor"] = executor

    container = build_container(db_config=db_config, org_timezone=org_timezone, executor=executor)
    app.extensions["attendance_engine"] = container

    register_attendance(app, container)
    register_calendars(app, container)
    register_corrections(app, container)
    register_leave(app, container)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"success": True, "timezone": container.clock.zone})

    if bool(getattr(settings, "SCHEDULER_ENABLED", False)):
        scheduler = build_scheduler(container, settings)
        scheduler.start()
        atexit.register(lambda: scheduler.shutdown(wait=False))
        app.extensions["attendance_scheduler"] = scheduler

    return app


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=app.config["DEBUG"], use_reloader=False)


if __name__ == "__main__":
    main()
