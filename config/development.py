import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "punchclock_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, schema.sql is applied on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Engine tunables
PUNCH_DEBOUNCE_SECONDS = int(os.getenv("PUNCH_DEBOUNCE_SECONDS", "60"))
WINDOW_LEAD_MINUTES = int(os.getenv("WINDOW_LEAD_MINUTES", "240"))
MAX_INTERVAL_MINUTES = int(os.getenv("MAX_INTERVAL_MINUTES", "960"))
SHORT_SHIFT_RATIO = os.getenv("SHORT_SHIFT_RATIO", "0.5")
DUPLICATE_EVENT_THRESHOLD = int(os.getenv("DUPLICATE_EVENT_THRESHOLD", "3"))
WEEKEND_DAYS = os.getenv("WEEKEND_DAYS", "5,6")
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "UTC")
DEFAULT_LEAVE_DAY_MINUTES = int(os.getenv("DEFAULT_LEAVE_DAY_MINUTES", "480"))
BATCH_WORKERS = int(os.getenv("BATCH_WORKERS", "2"))
WEEK_CLOSE_AFTER_DAYS = int(os.getenv("WEEK_CLOSE_AFTER_DAYS", "2"))
