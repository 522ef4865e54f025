"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PUNCH_DEBOUNCE_SECONDS = 60
DEFAULT_WINDOW_LEAD_MINUTES = 240
DEFAULT_MAX_INTERVAL_MINUTES = 16 * 60
DEFAULT_SHORT_SHIFT_RATIO = "0.5"
DEFAULT_DUPLICATE_EVENT_THRESHOLD = 3
DEFAULT_WEEKEND_DAYS = (5, 6)
DEFAULT_TIMEZONE = "UTC"
DEFAULT_LEAVE_DAY_MINUTES = 8 * 60
DEFAULT_BATCH_WORKERS = 4
DEFAULT_WEEK_CLOSE_AFTER_DAYS = 2

DEFAULT_GRACE_MINUTES = 15
DEFAULT_REQUIRED_MINUTES = 8 * 60

HOURS_QUANTUM = "0.01"
