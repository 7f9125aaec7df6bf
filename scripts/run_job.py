"""Run one scheduled job immediately, outside the scheduler.

    python scripts/run_job.py auto-punch-in --date 2024-03-04
    python scripts/run_job.py break-monitor --date 2024-03-04
    python scripts/run_job.py accrual --year 2024 --month 3
"""

from __future__ import annotations

import argparse
import importlib
import json

from dotenv import load_dotenv

from attendance_engine.common.datetime_utils import parse_iso_date
from attendance_engine.common.log import configure_logging
from attendance_engine.common.results import to_payload
from attendance_engine.config import get_settings_module
from attendance_engine.container import build_container
from attendance_engine.core.enums import Role

JOBS = ["auto-punch-in", "auto-punch-out", "break-monitor", "accrual", "carry-forward"]


def job_date(value: str):
    try:
        return parse_iso_date(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("job", choices=JOBS)
    parser.add_argument("--date", type=job_date, default=None)
    parser.add_argument("--year", type=int, default=None)
    parser.add_argument("--month", type=int, default=None)
    return parser


def main() -> None:
    args = build_parser().parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG, org_timezone=settings.ORG_TIMEZONE)

    if args.job == "auto-punch-in":
        result = container.attendance_jobs.run_auto_punch_in(args.date)
    elif args.job == "auto-punch-out":
        result = container.attendance_jobs.run_auto_punch_out(args.date)
    elif args.job == "break-monitor":
        result = container.attendance_jobs.run_break_monitoring(args.date)
    elif args.job == "accrual":
        result = container.leave_accrual_job.run_monthly_accrual(year=args.year, month=args.month)
    else:
        from_year = args.year or container.clock.today().year - 1
        result = container.leave_service.run_carry_forward(current_role=Role.ADMIN, from_year=from_year)

    print(json.dumps(to_payload(result), indent=2))


if __name__ == "__main__":
    main()
