import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_engine"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "Asia/Kolkata")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SCHEDULER_ENABLED = bool(int(os.getenv("SCHEDULER_ENABLED", "1")))
AUTO_PUNCH_IN_AT = os.getenv("AUTO_PUNCH_IN_AT", "09:15")
AUTO_PUNCH_OUT_AT = os.getenv("AUTO_PUNCH_OUT_AT", "18:30")
MONTHLY_ACCRUAL_DAY = int(os.getenv("MONTHLY_ACCRUAL_DAY", "1"))
BREAK_MONITOR_EVERY_HOURS = int(os.getenv("BREAK_MONITOR_EVERY_HOURS", "2"))
NOTIFY_WORKERS = int(os.getenv("NOTIFY_WORKERS", "4"))
