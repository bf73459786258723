"""
Slot generation.

Emits candidate start times that fit entirely inside an open interval,
stepping by a configured granularity independent of the service duration.
No overlap filtering happens here; see conflicts.py.

Usage:
    generator = SlotGenerator(step_minutes=15)
    for slot in generator.generate(open_intervals, timedelta(minutes=30)):
        ...
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator, Optional, Sequence

from booking_engine.config import settings
from booking_engine.errors import InvalidConfiguration
from booking_engine.scheduling.intervals import TimeInterval

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Slot:
    """A candidate start instant and the interval it would occupy."""

    start: datetime
    interval: TimeInterval

    @property
    def end(self) -> datetime:
        return self.interval.end


class SlotSequence:
    """Lazy, finite, restartable sequence of slots.

    Each call to ``iter()`` walks the open intervals again from the start.
    """

    def __init__(
        self, intervals: Sequence[TimeInterval], duration: timedelta, step: timedelta
    ) -> None:
        self._intervals = tuple(intervals)
        self._duration = duration
        self._step = step

    def __iter__(self) -> Iterator[Slot]:
        for interval in self._intervals:
            start = interval.start
            while start + self._duration <= interval.end:
                yield Slot(start=start, interval=TimeInterval(start, start + self._duration))
                start += self._step


class SlotGenerator:
    """Generates candidate slots from open intervals."""

    def __init__(self, step_minutes: Optional[int] = None) -> None:
        if step_minutes is None:
            step_minutes = settings.scheduling.slot_step_minutes
        if step_minutes <= 0:
            raise InvalidConfiguration(
                f"Slot step must be a positive number of minutes, got {step_minutes}"
            )
        self.step = timedelta(minutes=step_minutes)

    def generate(self, intervals: Sequence[TimeInterval], duration: timedelta) -> SlotSequence:
        """
        Build the slot sequence for one date's open intervals.

        Raises:
            InvalidConfiguration: non-positive duration, or a step longer
                than the duration (which would silently skip start times).
        """
        if duration <= timedelta(0):
            raise InvalidConfiguration(f"Service duration must be positive, got {duration}")
        if self.step > duration:
            raise InvalidConfiguration(
                f"Slot step {self.step} exceeds service duration {duration}"
            )
        return SlotSequence(intervals, duration, self.step)
