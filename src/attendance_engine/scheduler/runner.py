from __future__ import annotations

import logging
from typing import Any

from apscheduler.schedulers.background import BackgroundScheduler

from ..common.datetime_utils import parse_time_field
from ..container import Container
from ..core.constants import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)


def _hour_minute(settings: Any, name: str, default: str) -> tuple[int, int]:
    at = parse_time_field(str(getattr(settings, name, "") or default), name)
    return at.hour, at.minute


def build_scheduler(container: Container, settings: Any) -> BackgroundScheduler:
    """Register every scheduled job on a cron trigger in the org zone.

    The scheduler is returned unstarted; the caller owns its lifecycle.
    """
    tz = getattr(settings, "ORG_TIMEZONE", DEFAULT_TIMEZONE)
    scheduler = BackgroundScheduler(
        timezone=tz,
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": 3600,
        },
    )

    in_hour, in_minute = _hour_minute(settings, "AUTO_PUNCH_IN_AT", "09:15")
    out_hour, out_minute = _hour_minute(settings, "AUTO_PUNCH_OUT_AT", "18:30")
    accrual_day = int(getattr(settings, "MONTHLY_ACCRUAL_DAY", 1))
    break_every = int(getattr(settings, "BREAK_MONITOR_EVERY_HOURS", 2))

    scheduler.add_job(
        container.attendance_jobs.run_auto_punch_in,
        "cron",
        hour=in_hour,
        minute=in_minute,
        id="auto_punch_in",
        replace_existing=True,
    )
    scheduler.add_job(
        container.attendance_jobs.run_auto_punch_out,
        "cron",
        hour=out_hour,
        minute=out_minute,
        id="auto_punch_out",
        replace_existing=True,
    )
    scheduler.add_job(
        container.attendance_jobs.run_break_monitoring,
        "cron",
        day_of_week="mon-fri",
        hour=f"*/{break_every}",
        minute=0,
        id="break_monitoring",
        replace_existing=True,
    )
    scheduler.add_job(
        container.leave_accrual_job.run_monthly_accrual,
        "cron",
        day=accrual_day,
        hour=0,
        minute=5,
        id="monthly_leave_accrual",
        replace_existing=True,
    )

    logger.info(
        "Scheduler configured (%s): punch-in %02d:%02d, punch-out %02d:%02d, break check every %sh, accrual day %s",
        tz,
        in_hour,
        in_minute,
        out_hour,
        out_minute,
        break_every,
        accrual_day,
    )
    return scheduler
