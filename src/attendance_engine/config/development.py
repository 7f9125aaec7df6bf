import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_engine"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Organization time zone: every punch timestamp is resolved here.
ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "Asia/Kolkata")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

SCHEDULER_ENABLED = bool(int(os.getenv("SCHEDULER_ENABLED", "0")))
AUTO_PUNCH_IN_AT = os.getenv("AUTO_PUNCH_IN_AT", "09:15")
AUTO_PUNCH_OUT_AT = os.getenv("AUTO_PUNCH_OUT_AT", "18:30")
MONTHLY_ACCRUAL_DAY = int(os.getenv("MONTHLY_ACCRUAL_DAY", "1"))
BREAK_MONITOR_EVERY_HOURS = int(os.getenv("BREAK_MONITOR_EVERY_HOURS", "2"))
NOTIFY_WORKERS = int(os.getenv("NOTIFY_WORKERS", "4"))
