from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import HOURS_QUANTUM
from ..core.exceptions import ConfigurationError, InvalidPunchDataError


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def ensure_utc(value, *, field_name: str = "timestamp") -> datetime:
    """Normalize a punch timestamp to an aware UTC datetime.

    Accepts aware datetimes and ISO-8601 strings carrying an offset. Naive or
    unparseable values are corrupt input for the unit being processed.
    """

    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            raise InvalidPunchDataError(f"{field_name} is not an ISO-8601 timestamp: {value!r}")

    if not isinstance(value, datetime):
        raise InvalidPunchDataError(f"{field_name} has unsupported type {type(value)!r}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidPunchDataError(f"{field_name} is naive: {value.isoformat()}")
    return value.astimezone(timezone.utc)


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigurationError(f"Unknown timezone: {name!r}")


def whole_minutes(delta: timedelta) -> int:
    """Whole minutes in a span (floor)."""
    return int(delta.total_seconds() // 60)


def minutes_to_hours(minutes: int) -> Decimal:
    return (Decimal(int(minutes)) / Decimal(60)).quantize(Decimal(HOURS_QUANTUM), rounding=ROUND_HALF_UP)


def iso_week_start(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def week_days(week_start: date) -> list[date]:
    return [week_start + timedelta(days=i) for i in range(7)]


def iter_dates(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
