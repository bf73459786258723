"""
List bookable slots for a provider and service.

This is the advisory read path: Availability Resolver -> Slot Generator ->
Conflict Filter over a lock-free index snapshot. A listed slot can be taken
by someone else a moment later; create_booking re-checks authoritatively.
"""

import asyncio
from datetime import date, datetime
from typing import Optional, Union

from booking_engine.api.booking import to_error_detail
from booking_engine.api.services import (
    check_eligibility,
    ensure_offered,
    required_resource,
    resolve_service_terms,
)
from booking_engine.config import settings
from booking_engine.errors import InvalidInput, InvalidRule, SchedulingError
from booking_engine.logging_context import bind_request, get_request_logger
from booking_engine.scheduling.availability import resolve_availability
from booking_engine.scheduling.conflicts import ConflictFilter
from booking_engine.scheduling.slots import SlotGenerator
from booking_engine.schemas.booking_schema import SlotListResponse
from booking_engine.schemas.catalog_schema import PetSize
from booking_engine.store.base import BookingStore, provider_key, resource_key
from booking_engine.utils import get_timezone, to_iso_instant

logger = get_request_logger(__name__)


def _caller_timezone(name: Optional[str]) -> str:
    tz_name = name or settings.scheduling.default_timezone
    try:
        get_timezone(tz_name)
    except InvalidRule:
        raise InvalidInput(f"Unknown caller timezone: {tz_name!r}") from None
    return tz_name


def find_available_slots(
    store: BookingStore,
    provider_id: str,
    service_id: str,
    pet_category: str,
    pet_size: Union[PetSize, str],
    start_date: date,
    end_date: date,
    caller_timezone: Optional[str] = None,
    step_minutes: Optional[int] = None,
    not_before: Optional[datetime] = None,
) -> dict[str, list[str]]:
    """
    Compute available start instants per provider-local date.

    Args:
        start_date: first date (inclusive), in the provider's calendar.
        end_date: last date (exclusive).
        caller_timezone: timezone used to render the instants (default
            DEFAULT_TIMEZONE).
        step_minutes: slot granularity (default SLOT_STEP_MINUTES).
        not_before: drop slots starting before this instant.

    Returns:
        ``{"2026-03-09": ["2026-03-09T09:00:00-05:00", ...], ...}``; a date
        with no free slot maps to an empty list.

    Raises:
        SchedulingError subclasses; see booking_engine.errors.
    """
    tz_name = _caller_timezone(caller_timezone)
    provider = store.get_provider(provider_id)
    service = store.get_service(service_id)
    ensure_offered(provider, service)
    size = check_eligibility(service, pet_category, pet_size)
    terms = resolve_service_terms(service, size)
    resource = required_resource(provider, service)

    availability = resolve_availability(
        provider.rules, start_date, end_date, provider.timezone
    )
    generator = SlotGenerator(step_minutes)
    conflicts = ConflictFilter(
        provider_index=store.index_for(provider_key(provider.provider_id)),
        provider_capacity=provider.capacity,
        resource_index=(
            store.index_for(resource_key(provider.provider_id, resource.resource_type))
            if resource else None
        ),
        resource_capacity=resource.capacity if resource else None,
        quantity=service.resource_quantity,
    )

    result: dict[str, list[str]] = {}
    for day, intervals in availability.items():
        candidates = conflicts.filter(generator.generate(intervals, terms.duration))
        result[day.isoformat()] = [
            to_iso_instant(slot.start, tz_name)
            for slot in candidates
            if not_before is None or slot.start >= not_before
        ]

    logger.debug(
        "Listed %d slot(s) for provider %s service %s",
        sum(len(v) for v in result.values()), provider_id, service_id,
    )
    return result


def list_slots(
    store: BookingStore,
    provider_id: str,
    service_id: str,
    pet_category: str,
    pet_size: Union[PetSize, str],
    start_date: date,
    end_date: date,
    caller_timezone: Optional[str] = None,
    step_minutes: Optional[int] = None,
    not_before: Optional[datetime] = None,
) -> SlotListResponse:
    """List available slots, returning a structured error instead of raising."""
    with bind_request(provider_id=provider_id):
        try:
            slots = find_available_slots(
                store, provider_id, service_id, pet_category, pet_size,
                start_date, end_date, caller_timezone, step_minutes, not_before,
            )
        except SchedulingError as exc:
            logger.warning("Slot listing failed (%s): %s", exc.code, exc.message)
            return SlotListResponse(
                success=False,
                provider_id=provider_id,
                service_id=service_id,
                error=to_error_detail(exc),
            )
    return SlotListResponse(
        provider_id=provider_id,
        service_id=service_id,
        timezone=caller_timezone or settings.scheduling.default_timezone,
        slots=slots,
    )


async def alist_slots(*args, **kwargs) -> SlotListResponse:
    """Async variant of list_slots, run on a worker thread."""
    return await asyncio.to_thread(list_slots, *args, **kwargs)
