"""
Half-open time intervals in absolute (UTC) time.

Usage:
    a = TimeInterval(start, start + timedelta(minutes=30))
    a.overlaps(b)              # a.start < b.end and b.start < a.end
    merge_intervals([a, b, c]) # sorted, coalesced where touching
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

import pytz

from booking_engine.errors import InvalidInput


@dataclass(frozen=True, order=True)
class TimeInterval:
    """``[start, end)`` with tz-aware bounds normalized to UTC."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise InvalidInput("TimeInterval bounds must be timezone-aware")
        object.__setattr__(self, "start", self.start.astimezone(pytz.UTC))
        object.__setattr__(self, "end", self.end.astimezone(pytz.UTC))
        if self.start >= self.end:
            raise InvalidInput(
                f"TimeInterval start must be before end: {self.start} >= {self.end}"
            )

    @classmethod
    def from_start(cls, start: datetime, duration: timedelta) -> "TimeInterval":
        return cls(start, start + duration)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        """Touching intervals (``self.end == other.start``) do not overlap."""
        return self.start < other.end and other.start < self.end

    def contains(self, other: "TimeInterval") -> bool:
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"


def merge_intervals(intervals: Iterable[TimeInterval]) -> list[TimeInterval]:
    """Merge overlapping or adjacent intervals into a minimal disjoint set."""
    ordered = sorted(intervals)
    if not ordered:
        return []

    merged = [ordered[0]]
    for current in ordered[1:]:
        last = merged[-1]
        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = TimeInterval(last.start, current.end)
        else:
            merged.append(current)
    return merged
