import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_engine_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

ORG_TIMEZONE = "Asia/Kolkata"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SCHEDULER_ENABLED = False
AUTO_PUNCH_IN_AT = "09:15"
AUTO_PUNCH_OUT_AT = "18:30"
MONTHLY_ACCRUAL_DAY = 1
BREAK_MONITOR_EVERY_HOURS = 2
NOTIFY_WORKERS = 1
