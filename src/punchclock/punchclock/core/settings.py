from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from types import ModuleType

from . import constants
from .exceptions import ConfigurationError


def _parse_weekend_days(value) -> tuple[int, ...]:
    if isinstance(value, (tuple, list, frozenset, set)):
        days = [int(v) for v in value]
    else:
        days = [int(part) for part in str(value).split(",") if part.strip()]
    if any(d < 0 or d > 6 for d in days):
        raise ConfigurationError(f"WEEKEND_DAYS must be weekday numbers 0-6, got {value!r}")
    return tuple(sorted(set(days)))


@dataclass(frozen=True)
class EngineSettings:
    """Tunables of the processing engine.

    Built once by the composition root from the active settings module and
    handed to the services explicitly, so computation never reads the
    environment.
    """

    punch_debounce_seconds: int = constants.DEFAULT_PUNCH_DEBOUNCE_SECONDS
    window_lead_minutes: int = constants.DEFAULT_WINDOW_LEAD_MINUTES
    max_interval_minutes: int = constants.DEFAULT_MAX_INTERVAL_MINUTES
    short_shift_ratio: Decimal = Decimal(constants.DEFAULT_SHORT_SHIFT_RATIO)
    duplicate_event_threshold: int = constants.DEFAULT_DUPLICATE_EVENT_THRESHOLD
    weekend_days: tuple[int, ...] = constants.DEFAULT_WEEKEND_DAYS
    default_timezone: str = constants.DEFAULT_TIMEZONE
    default_leave_day_minutes: int = constants.DEFAULT_LEAVE_DAY_MINUTES
    batch_workers: int = constants.DEFAULT_BATCH_WORKERS
    week_close_after_days: int = constants.DEFAULT_WEEK_CLOSE_AFTER_DAYS

    def __post_init__(self):
        if self.punch_debounce_seconds < 0:
            raise ConfigurationError("PUNCH_DEBOUNCE_SECONDS must be >= 0")
        if self.window_lead_minutes < 0 or self.window_lead_minutes >= 24 * 60:
            raise ConfigurationError("WINDOW_LEAD_MINUTES must be within one day")
        if self.batch_workers < 1:
            raise ConfigurationError("BATCH_WORKERS must be >= 1")

    def is_weekend(self, day) -> bool:
        return day.weekday() in self.weekend_days

    @classmethod
    def from_module(cls, settings: ModuleType) -> "EngineSettings":
        try:
            ratio = Decimal(str(getattr(settings, "SHORT_SHIFT_RATIO", constants.DEFAULT_SHORT_SHIFT_RATIO)))
        except InvalidOperation:
            raise ConfigurationError("SHORT_SHIFT_RATIO must be a decimal number")

        return cls(
            punch_debounce_seconds=int(getattr(settings, "PUNCH_DEBOUNCE_SECONDS", constants.DEFAULT_PUNCH_DEBOUNCE_SECONDS)),
            window_lead_minutes=int(getattr(settings, "WINDOW_LEAD_MINUTES", constants.DEFAULT_WINDOW_LEAD_MINUTES)),
            max_interval_minutes=int(getattr(settings, "MAX_INTERVAL_MINUTES", constants.DEFAULT_MAX_INTERVAL_MINUTES)),
            short_shift_ratio=ratio,
            duplicate_event_threshold=int(
                getattr(settings, "DUPLICATE_EVENT_THRESHOLD", constants.DEFAULT_DUPLICATE_EVENT_THRESHOLD)
            ),
            weekend_days=_parse_weekend_days(getattr(settings, "WEEKEND_DAYS", constants.DEFAULT_WEEKEND_DAYS)),
            default_timezone=str(getattr(settings, "DEFAULT_TIMEZONE", constants.DEFAULT_TIMEZONE)),
            default_leave_day_minutes=int(
                getattr(settings, "DEFAULT_LEAVE_DAY_MINUTES", constants.DEFAULT_LEAVE_DAY_MINUTES)
            ),
            batch_workers=int(getattr(settings, "BATCH_WORKERS", constants.DEFAULT_BATCH_WORKERS)),
            week_close_after_days=int(
                getattr(settings, "WEEK_CLOSE_AFTER_DAYS", constants.DEFAULT_WEEK_CLOSE_AFTER_DAYS)
            ),
        )
