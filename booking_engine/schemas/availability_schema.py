"""Availability rule models: recurring weekly hours and date exceptions."""

from datetime import date, time
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class LocalWindow(BaseModel):
    """A wall-clock window within a single calendar date.

    An ``end_time`` of 00:00 means the end of that date (the following
    midnight), so 18:00-00:00 is a late opening until midnight.
    """

    start_time: time
    end_time: time


class RecurringRule(BaseModel):
    """Weekly working hours for one day of the week (0 = Monday).

    ``ends_next_day`` marks an overnight shift: the window runs from
    ``start_time`` until ``end_time`` on the following calendar date.
    """

    kind: Literal["recurring"] = "recurring"
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    timezone: str
    ends_next_day: bool = False
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None

    def applies_on(self, target: date) -> bool:
        if target.weekday() != self.day_of_week:
            return False
        if self.valid_from and target < self.valid_from:
            return False
        if self.valid_to and target > self.valid_to:
            return False
        return True


class DateException(BaseModel):
    """Override for one calendar date. No windows means closed all day."""

    kind: Literal["exception"] = "exception"
    date: date
    timezone: str
    windows: list[LocalWindow] = Field(default_factory=list)
    reason: Optional[str] = None

    @property
    def is_closed(self) -> bool:
        return not self.windows


AvailabilityRule = Annotated[
    Union[RecurringRule, DateException], Field(discriminator="kind")
]
