"""
Conflict filter for the slot-listing path.

Removes candidate slots that would exceed the provider's capacity or a
required shared resource's capacity. This is a read-only, best-effort
snapshot: it reserves nothing, and the commit coordinator re-checks
everything authoritatively.
"""

import logging
from typing import Iterable, Iterator, Optional

from booking_engine.errors import InvalidInput
from booking_engine.scheduling.interval_index import IntervalIndex
from booking_engine.scheduling.slots import Slot

logger = logging.getLogger(__name__)


class ConflictFilter:
    """Yields only candidates that fit under every applicable capacity."""

    def __init__(
        self,
        provider_index: IntervalIndex,
        provider_capacity: int = 1,
        resource_index: Optional[IntervalIndex] = None,
        resource_capacity: Optional[int] = None,
        quantity: int = 1,
    ) -> None:
        if provider_capacity < 1:
            raise InvalidInput(f"Provider capacity must be >= 1, got {provider_capacity}")
        if resource_index is not None and (resource_capacity is None or resource_capacity < 1):
            raise InvalidInput(f"Resource capacity must be >= 1, got {resource_capacity}")
        self.provider_index = provider_index
        self.provider_capacity = provider_capacity
        self.resource_index = resource_index
        self.resource_capacity = resource_capacity
        self.quantity = quantity

    def is_free(self, slot: Slot) -> bool:
        if not self.provider_index.has_capacity(slot.interval, self.provider_capacity):
            return False
        if self.resource_index is not None:
            return self.resource_index.has_capacity(
                slot.interval, self.resource_capacity, self.quantity
            )
        return True

    def filter(self, slots: Iterable[Slot]) -> Iterator[Slot]:
        for slot in slots:
            if self.is_free(slot):
                yield slot
