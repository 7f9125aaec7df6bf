"""Seed demo employees and their current-year leave balances."""

from __future__ import annotations

import importlib

from dotenv import load_dotenv

from attendance_engine.common.log import configure_logging
from attendance_engine.config import get_settings_module
from attendance_engine.container import build_container
from attendance_engine.database.mysql_base import db_cursor

DEMO_EMPLOYEES = [
    (1, "Admin User", "admin"),
    (2, "Asha Rao", "employee"),
    (3, "Vikram Nair", "employee"),
]


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG, org_timezone=settings.ORG_TIMEZONE)

    with db_cursor(container.conn) as (_, cur):
        cur.executemany(
            "INSERT IGNORE INTO employees(user_id, full_name, role) VALUES(%s,%s,%s)",
            DEMO_EMPLOYEES,
        )

    created = sum(container.leave_service.initialize_balances(user_id) for user_id, _, _ in DEMO_EMPLOYEES)
    print(f"OK: Seeded {len(DEMO_EMPLOYEES)} employees, {created} leave balances")


if __name__ == "__main__":
    main()
