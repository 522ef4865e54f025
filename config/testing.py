import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "punchclock_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

# Fixed values so tests do not depend on the environment
PUNCH_DEBOUNCE_SECONDS = 60
WINDOW_LEAD_MINUTES = 240
MAX_INTERVAL_MINUTES = 960
SHORT_SHIFT_RATIO = "0.5"
DUPLICATE_EVENT_THRESHOLD = 3
WEEKEND_DAYS = "5,6"
DEFAULT_TIMEZONE = "UTC"
DEFAULT_LEAVE_DAY_MINUTES = 480
BATCH_WORKERS = 2
WEEK_CLOSE_AFTER_DAYS = 2
