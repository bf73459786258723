"""Shared utilities used across the booking engine."""

from datetime import date, datetime

import pytz

from booking_engine.errors import InvalidInput, InvalidRule


def get_timezone(name: str) -> pytz.BaseTzInfo:
    """Resolve an IANA timezone identifier, raising InvalidRule when unknown."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise InvalidRule(f"Unknown timezone: {name!r}", timezone=name) from None


def to_iso_instant(value: datetime, tz_name: str = "UTC") -> str:
    """Render an aware instant as ISO-8601 in the given timezone.

    Examples:
        >>> to_iso_instant(datetime(2026, 3, 9, 14, 0, tzinfo=pytz.UTC))
        '2026-03-09T14:00:00+00:00'
    """
    return value.astimezone(get_timezone(tz_name)).isoformat()


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 instant string. Naive values are rejected."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        raise InvalidInput(f"Not an ISO-8601 instant: {value!r}") from None
    if parsed.tzinfo is None:
        raise InvalidInput(f"Instant must carry a UTC offset: {value!r}")
    return parsed.astimezone(pytz.UTC)


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD calendar date."""
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (ValueError, AttributeError):
        raise InvalidInput(f"Not a YYYY-MM-DD date: {value!r}") from None
