"""
In-process booking store.

Suitable when the whole schedule lives in one process: commit atomicity
comes from one ``threading.Lock`` per (provider, resource) key. Locks are
always taken in sorted key order so multi-key transactions cannot
deadlock, and acquisition is bounded by LOCK_TIMEOUT_SECONDS.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from booking_engine.config import settings
from booking_engine.errors import (
    InvalidConfiguration,
    InvalidInput,
    NotFound,
    StorageFailure,
)
from booking_engine.scheduling.interval_index import IntervalIndex
from booking_engine.schemas.booking_schema import Booking, BookingStatus
from booking_engine.schemas.catalog_schema import Pet, Provider, Service
from booking_engine.store.base import (
    BookingStore,
    IndexKey,
    booking_index_keys,
    index_quantity,
)

logger = logging.getLogger(__name__)


def _sort_key(key: IndexKey) -> tuple[str, str]:
    return (key[0], key[1] or "")


class InMemoryBookingStore(BookingStore):
    """Dictionary-backed store with per-key locks."""

    def __init__(self, lock_timeout: Optional[float] = None) -> None:
        if lock_timeout is None:
            lock_timeout = settings.commit.lock_timeout_seconds
        if lock_timeout < 0:
            raise InvalidConfiguration(f"Lock timeout must be >= 0, got {lock_timeout}")
        self.lock_timeout = lock_timeout
        self._providers: dict[str, Provider] = {}
        self._services: dict[str, Service] = {}
        self._pets: dict[str, Pet] = {}
        self._bookings: dict[str, Booking] = {}
        self._idempotency: dict[str, str] = {}
        self._indexes: dict[IndexKey, IntervalIndex] = {}
        self._locks: dict[IndexKey, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Catalog
    # ------------------------------------------------------------------ #

    def add_provider(self, provider: Provider) -> None:
        self._providers[provider.provider_id] = provider

    def add_service(self, service: Service) -> None:
        self._services[service.service_id] = service

    def add_pet(self, pet: Pet) -> None:
        self._pets[pet.pet_id] = pet

    def get_provider(self, provider_id: str) -> Provider:
        try:
            return self._providers[provider_id]
        except KeyError:
            raise NotFound(f"Provider {provider_id} not found", provider_id=provider_id) from None

    def get_service(self, service_id: str) -> Service:
        try:
            return self._services[service_id]
        except KeyError:
            raise NotFound(f"Service {service_id} not found", service_id=service_id) from None

    def get_pet(self, pet_id: str) -> Pet:
        try:
            return self._pets[pet_id]
        except KeyError:
            raise NotFound(f"Pet {pet_id} not found", pet_id=pet_id) from None

    # ------------------------------------------------------------------ #
    # Bookings
    # ------------------------------------------------------------------ #

    def get_booking(self, booking_id: str) -> Booking:
        try:
            return self._bookings[booking_id]
        except KeyError:
            raise NotFound(f"Booking {booking_id} not found", booking_id=booking_id) from None

    def find_by_idempotency_key(self, key: str) -> Optional[Booking]:
        booking_id = self._idempotency.get(key)
        return self._bookings.get(booking_id) if booking_id else None

    def list_bookings(
        self, provider_id: str, statuses: Optional[Iterable[BookingStatus]] = None
    ) -> list[Booking]:
        wanted = set(statuses) if statuses is not None else None
        bookings = [
            b for b in self._bookings.values()
            if b.provider_id == provider_id and (wanted is None or b.status in wanted)
        ]
        return sorted(bookings, key=lambda b: (b.start, b.booking_id))

    def insert_booking(self, booking: Booking) -> None:
        with self._registry_lock:
            if booking.booking_id in self._bookings:
                raise InvalidInput(f"Booking {booking.booking_id} already exists")
            if booking.idempotency_key in self._idempotency:
                raise InvalidInput(
                    f"Idempotency key already used: {booking.idempotency_key!r}",
                    idempotency_key=booking.idempotency_key,
                )
            self._bookings[booking.booking_id] = booking
            self._idempotency[booking.idempotency_key] = booking.booking_id

    def update_booking(self, booking: Booking) -> None:
        if booking.booking_id not in self._bookings:
            raise NotFound(f"Booking {booking.booking_id} not found", booking_id=booking.booking_id)
        self._bookings[booking.booking_id] = booking

    # ------------------------------------------------------------------ #
    # Indexes and locking
    # ------------------------------------------------------------------ #

    def index_for(self, key: IndexKey) -> IntervalIndex:
        with self._registry_lock:
            index = self._indexes.get(key)
            if index is None:
                index = self._indexes[key] = IntervalIndex(key=key)
            return index

    def _lock_for(self, key: IndexKey) -> threading.Lock:
        with self._registry_lock:
            return self._locks.setdefault(key, threading.Lock())

    @contextmanager
    def transaction(self, keys: Iterable[IndexKey]) -> Iterator[None]:
        acquired: list[threading.Lock] = []
        try:
            for key in sorted(set(keys), key=_sort_key):
                lock = self._lock_for(key)
                if not lock.acquire(timeout=self.lock_timeout):
                    raise StorageFailure(
                        f"Timed out after {self.lock_timeout}s waiting for schedule lock {key}",
                        key=list(key),
                    )
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def rebuild_indexes(self) -> None:
        """Recreate every index from the occupying bookings on record.

        Only safe while no commit is in flight; indexes are swapped without
        taking the per-key locks.
        """
        with self._registry_lock:
            self._indexes.clear()
        for booking in list(self._bookings.values()):
            if booking.occupies:
                for key in booking_index_keys(booking):
                    self.index_for(key).add(
                        booking.booking_id, booking.interval, index_quantity(booking, key)
                    )
        logger.info("Rebuilt %d interval index(es)", len(self._indexes))

    def reset(self) -> None:
        """Clear all bookings and indexes. Used by test fixtures for isolation."""
        with self._registry_lock:
            self._bookings.clear()
            self._idempotency.clear()
            self._indexes.clear()
