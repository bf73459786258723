"""
Backing store contract used by the scheduling engine.

A store serves catalog reads (providers, services, pets), owns the
committed bookings, and exposes one interval index per (provider, resource)
key. ``transaction`` must make the coordinator's check-and-insert
indivisible with respect to any other transaction on the same keys.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterable, Optional

from booking_engine.scheduling.interval_index import IntervalIndex
from booking_engine.schemas.booking_schema import Booking, BookingStatus
from booking_engine.schemas.catalog_schema import Pet, Provider, Service

# (provider_id, resource_type); resource_type None is the provider's own time.
IndexKey = tuple[str, Optional[str]]


def provider_key(provider_id: str) -> IndexKey:
    return (provider_id, None)


def resource_key(provider_id: str, resource_type: str) -> IndexKey:
    return (provider_id, resource_type)


def booking_index_keys(booking: Booking) -> list[IndexKey]:
    """Every index a booking occupies while confirmed or completed."""
    keys = [provider_key(booking.provider_id)]
    if booking.resource_type:
        keys.append(resource_key(booking.provider_id, booking.resource_type))
    return keys


def index_quantity(booking: Booking, key: IndexKey) -> int:
    """Units a booking holds on an index: one provider seat, or its resource quantity."""
    return booking.resource_quantity if key[1] is not None else 1


class BookingStore(ABC):
    """Abstract backing store."""

    # --- Catalog reads ---

    @abstractmethod
    def get_provider(self, provider_id: str) -> Provider:
        """Raises NotFound for unknown ids."""

    @abstractmethod
    def get_service(self, service_id: str) -> Service:
        """Raises NotFound for unknown ids."""

    @abstractmethod
    def get_pet(self, pet_id: str) -> Pet:
        """Raises NotFound for unknown ids."""

    # --- Bookings ---

    @abstractmethod
    def get_booking(self, booking_id: str) -> Booking:
        """Raises NotFound for unknown ids."""

    @abstractmethod
    def find_by_idempotency_key(self, key: str) -> Optional[Booking]:
        ...

    @abstractmethod
    def list_bookings(
        self, provider_id: str, statuses: Optional[Iterable[BookingStatus]] = None
    ) -> list[Booking]:
        ...

    @abstractmethod
    def insert_booking(self, booking: Booking) -> None:
        """Persist a new booking. Idempotency keys are unique."""

    @abstractmethod
    def update_booking(self, booking: Booking) -> None:
        ...

    # --- Indexes and atomicity ---

    @abstractmethod
    def index_for(self, key: IndexKey) -> IntervalIndex:
        """The authoritative interval index for ``key``."""

    @abstractmethod
    def transaction(self, keys: Iterable[IndexKey]) -> AbstractContextManager[None]:
        """Exclusive unit of work over ``keys``. Raises StorageFailure if unavailable."""
