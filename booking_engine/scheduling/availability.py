"""
Availability resolver.

Turns a provider's recurring weekly rules plus date exceptions into
concrete, timezone-correct open intervals for each date in a range:

1. Validate every rule up front (unknown timezone, inverted or zero-length
   windows, duplicate exceptions fail with InvalidRule). An exception
   window ending at 00:00 runs to the end of its date.
2. For each date, a DateException replaces all recurring rules for that
   date (an empty window list closes it).
3. Otherwise collect matching recurring rules, plus the after-midnight part
   of the previous date's overnight rules, convert wall clock to absolute
   time honoring DST, and merge overlapping/adjacent intervals.

The resolver owns no state: it is a pure function of rules and a range.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

import pytz

from booking_engine.config import settings
from booking_engine.errors import InvalidConfiguration, InvalidInput, InvalidRule
from booking_engine.scheduling.intervals import TimeInterval, merge_intervals
from booking_engine.schemas.availability_schema import (
    AvailabilityRule,
    DateException,
    LocalWindow,
    RecurringRule,
)
from booking_engine.utils import get_timezone

logger = logging.getLogger(__name__)

MIDNIGHT = time(0, 0)

DailyAvailability = dict[date, list[TimeInterval]]


def local_to_instant(tz: pytz.BaseTzInfo, day: date, wall: time) -> datetime:
    """Convert a local wall-clock time on ``day`` to an aware instant.

    Ambiguous times (fall-back) resolve to standard time; times inside a
    spring-forward gap resolve to the equivalent instant after the gap.
    """
    return tz.normalize(tz.localize(datetime.combine(day, wall), is_dst=False))


def _validate_recurring(rule: RecurringRule) -> None:
    get_timezone(rule.timezone)
    if rule.ends_next_day:
        if rule.end_time > rule.start_time:
            raise InvalidRule(
                f"Overnight rule spans more than 24 hours: "
                f"{rule.start_time}-{rule.end_time} (+1 day)",
                day_of_week=rule.day_of_week,
            )
    elif rule.end_time <= rule.start_time:
        raise InvalidRule(
            f"Rule end must be after start: {rule.start_time}-{rule.end_time}",
            day_of_week=rule.day_of_week,
        )
    if rule.valid_from and rule.valid_to and rule.valid_to < rule.valid_from:
        raise InvalidRule(
            f"Rule validity ends before it starts: {rule.valid_from} > {rule.valid_to}"
        )


def _validate_exception(exception: DateException) -> None:
    get_timezone(exception.timezone)
    for window in exception.windows:
        if window.end_time <= window.start_time and window.end_time != MIDNIGHT:
            raise InvalidRule(
                f"Exception window end must be after start on {exception.date}: "
                f"{window.start_time}-{window.end_time}",
                date=exception.date.isoformat(),
            )


def _partition(
    rules: Iterable[AvailabilityRule],
) -> tuple[list[RecurringRule], dict[date, DateException]]:
    """Validate rules and split them into recurring rules and exceptions by date."""
    recurring: list[RecurringRule] = []
    exceptions: dict[date, DateException] = {}
    for rule in rules:
        if isinstance(rule, RecurringRule):
            _validate_recurring(rule)
            recurring.append(rule)
        elif isinstance(rule, DateException):
            _validate_exception(rule)
            if rule.date in exceptions:
                raise InvalidRule(
                    f"Duplicate date exception for {rule.date}",
                    date=rule.date.isoformat(),
                )
            exceptions[rule.date] = rule
        else:
            raise InvalidRule(f"Unsupported availability rule: {type(rule).__name__}")
    return recurring, exceptions


def _absolute(start: datetime, end: datetime, day: date) -> TimeInterval:
    if end <= start:
        raise InvalidRule(
            f"Window on {day} is empty once converted to absolute time",
            date=day.isoformat(),
        )
    return TimeInterval(start, end)


def _window_interval(tz_name: str, day: date, window: LocalWindow) -> TimeInterval:
    tz = get_timezone(tz_name)
    if window.end_time == MIDNIGHT:
        end = local_to_instant(tz, day + timedelta(days=1), MIDNIGHT)
    else:
        end = local_to_instant(tz, day, window.end_time)
    return _absolute(local_to_instant(tz, day, window.start_time), end, day)


def _same_day_portion(rule: RecurringRule, day: date) -> TimeInterval:
    tz = get_timezone(rule.timezone)
    start = local_to_instant(tz, day, rule.start_time)
    if rule.ends_next_day:
        end = local_to_instant(tz, day + timedelta(days=1), MIDNIGHT)
    else:
        end = local_to_instant(tz, day, rule.end_time)
    return _absolute(start, end, day)


def _next_day_portion(rule: RecurringRule, day: date) -> Optional[TimeInterval]:
    """After-midnight part of an overnight rule that started the day before."""
    if rule.end_time == MIDNIGHT:
        return None
    tz = get_timezone(rule.timezone)
    return _absolute(
        local_to_instant(tz, day, MIDNIGHT),
        local_to_instant(tz, day, rule.end_time),
        day,
    )


def _resolve_day(
    day: date,
    recurring: list[RecurringRule],
    exceptions: dict[date, DateException],
) -> list[TimeInterval]:
    exception = exceptions.get(day)
    if exception is not None:
        return merge_intervals(
            _window_interval(exception.timezone, day, window)
            for window in exception.windows
        )

    previous = day - timedelta(days=1)
    intervals: list[TimeInterval] = []
    for rule in recurring:
        if rule.applies_on(day):
            intervals.append(_same_day_portion(rule, day))
        if rule.ends_next_day and previous not in exceptions and rule.applies_on(previous):
            spill = _next_day_portion(rule, day)
            if spill is not None:
                intervals.append(spill)
    return merge_intervals(intervals)


def check_date_range(range_start: date, range_end: date, max_days: Optional[int] = None) -> None:
    """Validate a half-open ``[range_start, range_end)`` date range."""
    if range_end <= range_start:
        raise InvalidInput(
            f"Date range end must be after start: {range_start} >= {range_end}"
        )
    limit = settings.scheduling.max_range_days if max_days is None else max_days
    if limit <= 0:
        raise InvalidConfiguration(f"Date range limit must be positive, got {limit}")
    if (range_end - range_start).days > limit:
        raise InvalidInput(
            f"Date range spans {(range_end - range_start).days} days, limit is {limit}"
        )


def resolve_availability(
    rules: Iterable[AvailabilityRule],
    range_start: date,
    range_end: date,
    timezone: str,
    max_days: Optional[int] = None,
) -> DailyAvailability:
    """
    Resolve open intervals for every date in ``[range_start, range_end)``.

    Args:
        rules: recurring rules and date exceptions for one provider.
        range_start: first calendar date (inclusive).
        range_end: last calendar date (exclusive).
        timezone: the provider's timezone; dates are its calendar dates.
        max_days: optional override of the MAX_RANGE_DAYS limit.

    Returns:
        Mapping of each date to its ordered, pairwise-disjoint intervals.
        Closed dates map to an empty list.

    Raises:
        InvalidRule: malformed rule or unknown timezone.
        InvalidInput: empty, inverted or oversized date range.
    """
    get_timezone(timezone)
    check_date_range(range_start, range_end, max_days)
    recurring, exceptions = _partition(rules)

    result: DailyAvailability = {}
    day = range_start
    while day < range_end:
        result[day] = _resolve_day(day, recurring, exceptions)
        day += timedelta(days=1)

    logger.debug(
        "Resolved availability %s..%s: %d open interval(s) across %d date(s)",
        range_start, range_end, sum(len(v) for v in result.values()), len(result),
    )
    return result


def open_minutes(availability: DailyAvailability) -> int:
    """Total open time across all resolved dates, in whole minutes."""
    total = sum(
        (interval.duration for intervals in availability.values() for interval in intervals),
        timedelta(),
    )
    return int(total.total_seconds() // 60)
