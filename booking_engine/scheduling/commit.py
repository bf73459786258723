"""
Booking commit coordinator.

The authoritative path for creating a booking and for every status change
that touches the committed schedule:

1. Idempotent replay: a stored booking with the same idempotency key is
   returned unchanged, without re-validation.
2. Inside one store transaction over the affected (provider, resource)
   keys, re-check the live interval indexes (never the listing snapshot).
3. If capacity remains, index and insert the booking as CONFIRMED.
   Otherwise raise SlotConflict immediately; there is no waiting and no
   automatic retry.

Usage:
    coordinator = BookingCommitCoordinator(store)
    result = coordinator.commit(CommitRequest(...))
    coordinator.cancel(result.booking.booking_id)
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from booking_engine.errors import InvalidInput, NotFound, SlotConflict
from booking_engine.logging_context import get_request_logger
from booking_engine.scheduling.intervals import TimeInterval
from booking_engine.scheduling.lifecycle import (
    BookingTrigger,
    apply_transition,
    releases_interval,
)
from booking_engine.schemas.booking_schema import Booking, BookingStatus
from booking_engine.schemas.catalog_schema import Provider
from booking_engine.store.base import (
    BookingStore,
    IndexKey,
    booking_index_keys,
    index_quantity,
    provider_key,
    resource_key,
)

logger = get_request_logger(__name__)


@dataclass(frozen=True)
class CommitRequest:
    """Everything the coordinator needs to place one booking."""

    provider_id: str
    service_id: str
    pet_id: str
    start: datetime
    duration: timedelta
    idempotency_key: str
    resource_type: Optional[str] = None
    resource_quantity: int = 1
    notes: Optional[str] = None
    price_snapshot: Decimal = Decimal("0")

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval.from_start(self.start, self.duration)


@dataclass(frozen=True)
class CommitResult:
    booking: Booking
    replayed: bool = False


def _new_booking_id() -> str:
    return f"BK-{uuid.uuid4().hex[:10].upper()}"


class BookingCommitCoordinator:
    """Serializes check-and-commit per (provider, resource) key."""

    def __init__(self, store: BookingStore) -> None:
        self.store = store

    # ------------------------------------------------------------------ #
    # Create
    # ------------------------------------------------------------------ #

    def commit(self, request: CommitRequest) -> CommitResult:
        """
        Create a booking, or replay the one already stored for the key.

        Raises:
            SlotConflict: the interval is no longer free.
            InvalidInput: idempotency key reused for a different request.
            NotFound: unknown provider or provider resource.
            StorageFailure: the store could not run the transaction.
        """
        existing = self.store.find_by_idempotency_key(request.idempotency_key)
        if existing is not None:
            return self._replay(existing, request)

        provider = self.store.get_provider(request.provider_id)
        interval = request.interval
        keys = self._keys_for(provider, request)

        with self.store.transaction(keys):
            # A concurrent retry of the same request may have committed while we waited.
            existing = self.store.find_by_idempotency_key(request.idempotency_key)
            if existing is not None:
                return self._replay(existing, request)

            self._check_capacity(provider, request, interval)

            now = datetime.now(timezone.utc)
            booking = Booking(
                booking_id=_new_booking_id(),
                provider_id=request.provider_id,
                service_id=request.service_id,
                pet_id=request.pet_id,
                start=interval.start,
                end=interval.end,
                status=apply_transition(BookingStatus.PENDING, BookingTrigger.CONFIRM),
                idempotency_key=request.idempotency_key,
                resource_type=request.resource_type,
                resource_quantity=request.resource_quantity,
                notes=request.notes,
                price_snapshot=request.price_snapshot,
                created_at=now,
                updated_at=now,
            )

            indexed: list[IndexKey] = []
            try:
                for key in keys:
                    self.store.index_for(key).add(
                        booking.booking_id, interval, index_quantity(booking, key)
                    )
                    indexed.append(key)
                self.store.insert_booking(booking)
            except Exception:
                for key in indexed:
                    self.store.index_for(key).remove(booking.booking_id)
                raise

        logger.info(
            "Booking %s confirmed for provider %s at %s",
            booking.booking_id, booking.provider_id, interval,
        )
        return CommitResult(booking=booking)

    def _keys_for(self, provider: Provider, request: CommitRequest) -> list[IndexKey]:
        keys = [provider_key(provider.provider_id)]
        if request.resource_type:
            if request.resource_type not in provider.resources:
                raise NotFound(
                    f"Provider {provider.provider_id} has no resource "
                    f"'{request.resource_type}'",
                    provider_id=provider.provider_id,
                    resource_type=request.resource_type,
                )
            keys.append(resource_key(provider.provider_id, request.resource_type))
        return keys

    def _check_capacity(
        self, provider: Provider, request: CommitRequest, interval: TimeInterval
    ) -> None:
        provider_index = self.store.index_for(provider_key(provider.provider_id))
        if not provider_index.has_capacity(interval, provider.capacity):
            logger.info("Slot conflict on provider %s at %s", provider.provider_id, interval)
            raise SlotConflict(
                f"Provider {provider.provider_id} is already booked at {interval}",
                provider_id=provider.provider_id,
                start=interval.start.isoformat(),
            )

        if request.resource_type:
            resource = provider.resources[request.resource_type]
            resource_index = self.store.index_for(
                resource_key(provider.provider_id, request.resource_type)
            )
            if not resource_index.has_capacity(
                interval, resource.capacity, request.resource_quantity
            ):
                logger.info(
                    "Resource '%s' at capacity for provider %s at %s",
                    request.resource_type, provider.provider_id, interval,
                )
                raise SlotConflict(
                    f"Resource '{request.resource_type}' is at capacity at {interval}",
                    provider_id=provider.provider_id,
                    resource_type=request.resource_type,
                    start=interval.start.isoformat(),
                )

    def _replay(self, existing: Booking, request: CommitRequest) -> CommitResult:
        same_request = (
            existing.provider_id == request.provider_id
            and existing.service_id == request.service_id
            and existing.pet_id == request.pet_id
            and existing.start == request.interval.start
        )
        if not same_request:
            raise InvalidInput(
                f"Idempotency key {request.idempotency_key!r} was already used "
                "for a different booking request",
                idempotency_key=request.idempotency_key,
                booking_id=existing.booking_id,
            )
        logger.info(
            "Idempotent replay of %s for key %s",
            existing.booking_id, request.idempotency_key,
        )
        return CommitResult(booking=existing, replayed=True)

    # ------------------------------------------------------------------ #
    # Status changes
    # ------------------------------------------------------------------ #

    def cancel(self, booking_id: str) -> Booking:
        """Cancel a confirmed booking and free its interval immediately."""
        return self._change_status(booking_id, BookingTrigger.CANCEL)

    def complete(self, booking_id: str) -> Booking:
        return self._change_status(booking_id, BookingTrigger.COMPLETE)

    def mark_no_show(self, booking_id: str) -> Booking:
        return self._change_status(booking_id, BookingTrigger.MARK_NO_SHOW)

    def _change_status(self, booking_id: str, trigger: BookingTrigger) -> Booking:
        keys = booking_index_keys(self.store.get_booking(booking_id))

        with self.store.transaction(keys):
            booking = self.store.get_booking(booking_id)
            new_status = apply_transition(booking.status, trigger)
            updated = booking.model_copy(
                update={"status": new_status, "updated_at": datetime.now(timezone.utc)}
            )
            self.store.update_booking(updated)
            if releases_interval(booking.status, new_status):
                for key in keys:
                    self.store.index_for(key).remove(booking_id)

        logger.info(
            "Booking %s: %s -> %s", booking_id, booking.status.value, new_status.value
        )
        return updated
