"""
Booking lifecycle state machine.

Every status change must be an explicitly defined transition:

    PENDING   -> CONFIRMED
    CONFIRMED -> CANCELLED | COMPLETED | NO_SHOW

Cancelled and no-show bookings are terminal and never return to an
occupying status.

Usage:
    new_status = apply_transition(booking.status, BookingTrigger.CANCEL)
"""

import logging
from dataclasses import dataclass
from enum import Enum

from booking_engine.errors import InvalidTransition
from booking_engine.schemas.booking_schema import OCCUPYING_STATUSES, BookingStatus

logger = logging.getLogger(__name__)


class BookingTrigger(str, Enum):
    """Events that cause status transitions."""
    CONFIRM = "confirm"
    CANCEL = "cancel"
    COMPLETE = "complete"
    MARK_NO_SHOW = "mark_no_show"


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus
    trigger: BookingTrigger


TRANSITIONS: list[Transition] = [
    Transition(BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingTrigger.CONFIRM),
    Transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingTrigger.CANCEL),
    Transition(BookingStatus.CONFIRMED, BookingStatus.COMPLETED, BookingTrigger.COMPLETE),
    Transition(BookingStatus.CONFIRMED, BookingStatus.NO_SHOW, BookingTrigger.MARK_NO_SHOW),
]

TERMINAL_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW}
)


def get_valid_triggers(status: BookingStatus) -> list[BookingTrigger]:
    """Return all triggers valid from ``status``."""
    return [t.trigger for t in TRANSITIONS if t.from_status == status]


def apply_transition(status: BookingStatus, trigger: BookingTrigger) -> BookingStatus:
    """
    Resolve the status reached from ``status`` via ``trigger``.

    Raises:
        InvalidTransition: If no valid transition exists.
    """
    for t in TRANSITIONS:
        if t.from_status == status and t.trigger == trigger:
            logger.debug(
                "Booking transition: %s -> %s (trigger: %s)",
                status.value, t.to_status.value, trigger.value,
            )
            return t.to_status

    valid = [t.value for t in get_valid_triggers(status)]
    raise InvalidTransition(
        f"No valid transition from '{status.value}' "
        f"with trigger '{trigger.value}'. Valid triggers: {valid}",
        status=status.value,
        trigger=trigger.value,
    )


def releases_interval(before: BookingStatus, after: BookingStatus) -> bool:
    """True when a transition takes a booking out of the interval index."""
    return before in OCCUPYING_STATUSES and after not in OCCUPYING_STATUSES


def is_terminal(status: BookingStatus) -> bool:
    return status in TERMINAL_STATUSES
