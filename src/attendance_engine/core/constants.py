"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time
from decimal import Decimal

DEFAULT_TIMEZONE = "Asia/Kolkata"

DEFAULT_FULL_DAY_HOURS = Decimal("7.5")
DEFAULT_HALF_DAY_HOURS = Decimal("7.0")
DEFAULT_WEEKEND_DAYS = frozenset({"saturday", "sunday"})
DEFAULT_STANDARD_START = time(9, 0)
DEFAULT_STANDARD_END = time(18, 0)

DEFAULT_HISTORY_LIMIT = 31
DEFAULT_LIST_LIMIT = 200

# Completed break time per day above which the employee is warned.
MAX_DAILY_BREAK_MINUTES = 120

# Settings keys stored in attendance_settings.
SETTING_FULL_DAY_HOURS = "full_day_hours"
SETTING_HALF_DAY_HOURS = "half_day_hours"
SETTING_WEEKEND_DAYS = "weekend_days"
SETTING_STANDARD_START = "standard_start_time"
SETTING_STANDARD_END = "standard_end_time"

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
