"""
Error taxonomy for the scheduling engine.

Every failure the engine reports is a ``SchedulingError`` subclass with a
stable ``code`` so the API layer can turn it into a structured response.
Only ``SlotConflict`` is expected under normal concurrent load and is the
only error marked retryable (after re-listing slots).
"""

from typing import Any


class SchedulingError(Exception):
    """Base class for all engine errors."""

    code: str = "scheduling_error"
    retryable: bool = False

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInput(SchedulingError, ValueError):
    """Malformed request shape or value."""

    code = "invalid_input"


class InvalidRule(SchedulingError, ValueError):
    """Malformed availability rule, inverted window, or unknown timezone."""

    code = "invalid_rule"


class InvalidConfiguration(SchedulingError, ValueError):
    """Bad step, duration, or environment configuration."""

    code = "invalid_configuration"


class Ineligible(SchedulingError):
    """The pet is not accepted by the requested service."""

    code = "ineligible"


class SlotConflict(SchedulingError):
    """Lost the commit race or the interval is at capacity."""

    code = "slot_conflict"
    retryable = True


class NotFound(SchedulingError, LookupError):
    """Unknown provider, service, resource, pet or booking."""

    code = "not_found"


class StorageFailure(SchedulingError):
    """Backing store unavailable. Never retried by the engine."""

    code = "storage_failure"


class InvalidTransition(InvalidInput):
    """Booking status change not allowed from the current status."""

    code = "invalid_transition"
