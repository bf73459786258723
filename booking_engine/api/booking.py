"""
Booking operations exposed to callers.

Validation and eligibility run first and fail fast without touching the
interval index. The commit itself is delegated to the
BookingCommitCoordinator, whose transaction is the only place a slot is
decided to be free.
"""

import asyncio
from datetime import timedelta
from typing import Optional

from booking_engine.api.services import (
    check_eligibility,
    ensure_offered,
    required_resource,
    resolve_service_terms,
)
from booking_engine.errors import InvalidInput, SchedulingError
from booking_engine.logging_context import bind_request, get_request_logger
from booking_engine.scheduling.availability import resolve_availability
from booking_engine.scheduling.commit import BookingCommitCoordinator, CommitRequest
from booking_engine.scheduling.intervals import TimeInterval
from booking_engine.schemas.booking_schema import (
    Booking,
    BookingRequest,
    BookingResponse,
    ErrorDetail,
)
from booking_engine.schemas.catalog_schema import Provider
from booking_engine.store.base import BookingStore
from booking_engine.utils import get_timezone

logger = get_request_logger(__name__)


def to_error_detail(exc: SchedulingError) -> ErrorDetail:
    return ErrorDetail(
        code=exc.code,
        message=exc.message,
        retryable=exc.retryable,
        details={k: v for k, v in exc.details.items() if v is not None},
    )


def _error_response(exc: SchedulingError) -> BookingResponse:
    return BookingResponse(success=False, error=to_error_detail(exc))


def _check_working_hours(provider: Provider, interval: TimeInterval) -> None:
    """The occupied interval must sit inside one open interval of its local date."""
    local_day = interval.start.astimezone(get_timezone(provider.timezone)).date()
    open_intervals = resolve_availability(
        provider.rules, local_day, local_day + timedelta(days=1), provider.timezone
    )[local_day]
    if not any(window.contains(interval) for window in open_intervals):
        raise InvalidInput(
            f"{interval} is outside provider {provider.provider_id}'s open hours",
            provider_id=provider.provider_id,
            start=interval.start.isoformat(),
        )


def place_booking(store: BookingStore, request: BookingRequest) -> tuple[Booking, bool]:
    """
    Validate and commit a booking request.

    Returns:
        ``(booking, replayed)``.

    Raises:
        SchedulingError subclasses; see booking_engine.errors.
    """
    if request.start.tzinfo is None:
        raise InvalidInput("Booking start must carry a UTC offset")
    coordinator = BookingCommitCoordinator(store)

    existing = store.find_by_idempotency_key(request.idempotency_key)
    if existing is not None:
        result = coordinator.commit(CommitRequest(
            provider_id=request.provider_id,
            service_id=request.service_id,
            pet_id=request.pet_id,
            start=request.start,
            duration=existing.end - existing.start,
            idempotency_key=request.idempotency_key,
        ))
        return result.booking, result.replayed

    provider = store.get_provider(request.provider_id)
    service = store.get_service(request.service_id)
    pet = store.get_pet(request.pet_id)
    ensure_offered(provider, service)
    check_eligibility(service, pet.category, pet.size)
    terms = resolve_service_terms(service, pet.size)
    resource = required_resource(provider, service)

    commit_request = CommitRequest(
        provider_id=provider.provider_id,
        service_id=service.service_id,
        pet_id=pet.pet_id,
        start=request.start,
        duration=terms.duration,
        idempotency_key=request.idempotency_key,
        resource_type=resource.resource_type if resource else None,
        resource_quantity=service.resource_quantity,
        notes=request.notes,
        price_snapshot=terms.price,
    )
    _check_working_hours(provider, commit_request.interval)

    result = coordinator.commit(commit_request)
    return result.booking, result.replayed


def create_booking(store: BookingStore, request: BookingRequest) -> BookingResponse:
    """Create a booking and return the confirmation or a structured error."""
    with bind_request(request.idempotency_key, request.provider_id):
        try:
            booking, replayed = place_booking(store, request)
        except SchedulingError as exc:
            logger.warning("Booking request failed (%s): %s", exc.code, exc.message)
            return _error_response(exc)
    return BookingResponse(success=True, booking=booking, replayed=replayed)


def cancel_booking(store: BookingStore, booking_id: str) -> BookingResponse:
    """Cancel a confirmed booking, freeing its slot."""
    try:
        booking = BookingCommitCoordinator(store).cancel(booking_id)
    except SchedulingError as exc:
        return _error_response(exc)
    return BookingResponse(success=True, booking=booking)


def complete_booking(store: BookingStore, booking_id: str) -> BookingResponse:
    try:
        booking = BookingCommitCoordinator(store).complete(booking_id)
    except SchedulingError as exc:
        return _error_response(exc)
    return BookingResponse(success=True, booking=booking)


def mark_no_show(store: BookingStore, booking_id: str) -> BookingResponse:
    try:
        booking = BookingCommitCoordinator(store).mark_no_show(booking_id)
    except SchedulingError as exc:
        return _error_response(exc)
    return BookingResponse(success=True, booking=booking)


def get_booking(store: BookingStore, booking_id: str) -> Optional[Booking]:
    """Retrieve a booking by id, or None."""
    try:
        return store.get_booking(booking_id)
    except LookupError:
        return None


async def acreate_booking(store: BookingStore, request: BookingRequest) -> BookingResponse:
    """Async variant of create_booking, run on a worker thread."""
    return await asyncio.to_thread(create_booking, store, request)

