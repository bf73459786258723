"""Shared test fixtures and helpers."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

import pytest
import pytz

from booking_engine.scheduling.commit import BookingCommitCoordinator, CommitRequest
from booking_engine.scheduling.intervals import TimeInterval
from booking_engine.schemas.availability_schema import RecurringRule
from booking_engine.schemas.catalog_schema import (
    Pet,
    PetSize,
    Provider,
    Resource,
    Service,
    ServiceVariant,
)
from booking_engine.store.memory import InMemoryBookingStore

BERLIN = "Europe/Berlin"
NEW_YORK = "America/New_York"

# 2026-03-09 is a Monday; Berlin is on CET (UTC+1) until 2026-03-29.
MONDAY = date(2026, 3, 9)
TUESDAY = date(2026, 3, 10)


def at(day: date, hour: int, minute: int = 0, tz_name: str = BERLIN) -> datetime:
    """Aware instant for a local wall-clock time."""
    tz = pytz.timezone(tz_name)
    return tz.localize(datetime.combine(day, time(hour, minute)))


def interval(day: date, start: tuple[int, int], end: tuple[int, int], tz_name: str = BERLIN) -> TimeInterval:
    return TimeInterval(at(day, *start, tz_name=tz_name), at(day, *end, tz_name=tz_name))


def weekday_rules(
    start: time = time(9, 0), end: time = time(17, 0), tz_name: str = BERLIN
) -> list[RecurringRule]:
    return [
        RecurringRule(day_of_week=day, start_time=start, end_time=end, timezone=tz_name)
        for day in range(5)
    ]


def make_provider(
    provider_id: str = "groomer-1",
    capacity: int = 1,
    resources: Optional[dict[str, Resource]] = None,
    rules: Optional[list] = None,
) -> Provider:
    return Provider(
        provider_id=provider_id,
        name=provider_id.title(),
        timezone=BERLIN,
        capacity=capacity,
        rules=weekday_rules() if rules is None else rules,
        resources=resources or {},
    )


SERVICES = [
    Service(
        service_id="trim",
        name="Nail Trim",
        duration_minutes=30,
        base_price=Decimal("25.00"),
        eligible_categories={"dog", "cat"},
    ),
    Service(
        service_id="wash",
        name="Wash",
        duration_minutes=60,
        base_price=Decimal("50.00"),
        eligible_categories={"dog"},
        size_overrides={
            PetSize.LARGE: ServiceVariant(duration_minutes=90, price=Decimal("75.00")),
        },
    ),
    Service(
        service_id="table-groom",
        name="Table Groom",
        duration_minutes=60,
        base_price=Decimal("80.00"),
        eligible_categories={"dog"},
        eligible_sizes={PetSize.SMALL, PetSize.MEDIUM},
        resource_type="table",
    ),
]

PETS = [
    Pet(pet_id="dog-large", name="Rex", category="dog", size=PetSize.LARGE),
    Pet(pet_id="dog-small", name="Bella", category="dog", size=PetSize.SMALL),
    Pet(pet_id="cat-small", name="Mia", category="cat", size=PetSize.SMALL),
    Pet(pet_id="rabbit", name="Bun", category="rabbit", size=PetSize.SMALL),
]


@pytest.fixture
def store() -> InMemoryBookingStore:
    """Store with an exclusive groomer and a three-seat salon with two tables."""
    s = InMemoryBookingStore(lock_timeout=2.0)
    s.add_provider(make_provider())
    s.add_provider(make_provider(
        provider_id="salon",
        capacity=3,
        resources={"table": Resource(resource_type="table", capacity=2)},
    ))
    for service in SERVICES:
        s.add_service(service)
    for pet in PETS:
        s.add_pet(pet)
    return s


@pytest.fixture
def coordinator(store) -> BookingCommitCoordinator:
    return BookingCommitCoordinator(store)


def make_commit_request(
    start: datetime,
    key: str = "key-1",
    provider_id: str = "groomer-1",
    service_id: str = "trim",
    pet_id: str = "cat-small",
    minutes: int = 30,
    resource_type: Optional[str] = None,
    resource_quantity: int = 1,
) -> CommitRequest:
    """Helper to create a CommitRequest with sensible defaults."""
    return CommitRequest(
        provider_id=provider_id,
        service_id=service_id,
        pet_id=pet_id,
        start=start,
        duration=timedelta(minutes=minutes),
        idempotency_key=key,
        resource_type=resource_type,
        resource_quantity=resource_quantity,
    )
