"""
Seed catalog for the CLI and local experiments.

One grooming salon in New York with two groomers, one grooming table,
weekday and Saturday hours, a holiday closure and a short Christmas Eve.
"""

from datetime import date, time
from decimal import Decimal

from booking_engine.schemas.availability_schema import (
    DateException,
    LocalWindow,
    RecurringRule,
)
from booking_engine.schemas.catalog_schema import (
    Pet,
    PetSize,
    Provider,
    Resource,
    Service,
    ServiceVariant,
)
from booking_engine.store.memory import InMemoryBookingStore

DEMO_TIMEZONE = "America/New_York"

DEMO_SERVICES: list[Service] = [
    Service(
        service_id="nail-trim",
        name="Nail Trim",
        duration_minutes=15,
        base_price=Decimal("20.00"),
        eligible_categories={"dog", "cat"},
    ),
    Service(
        service_id="bath-brush",
        name="Bath & Brush",
        duration_minutes=45,
        base_price=Decimal("55.00"),
        eligible_categories={"dog"},
        size_overrides={
            PetSize.LARGE: ServiceVariant(duration_minutes=60, price=Decimal("70.00")),
            PetSize.GIANT: ServiceVariant(duration_minutes=75, price=Decimal("85.00")),
        },
    ),
    Service(
        service_id="full-groom",
        name="Full Groom",
        duration_minutes=90,
        base_price=Decimal("95.00"),
        eligible_categories={"dog"},
        eligible_sizes={PetSize.SMALL, PetSize.MEDIUM, PetSize.LARGE},
        resource_type="grooming_table",
    ),
]

DEMO_PETS: list[Pet] = [
    Pet(pet_id="pet-rex", name="Rex", category="dog", size=PetSize.LARGE),
    Pet(pet_id="pet-bella", name="Bella", category="dog", size=PetSize.SMALL),
    Pet(pet_id="pet-mia", name="Mia", category="cat", size=PetSize.SMALL),
]


def demo_provider() -> Provider:
    weekday_rules = [
        RecurringRule(
            day_of_week=day, start_time=time(9, 0), end_time=time(17, 0),
            timezone=DEMO_TIMEZONE,
        )
        for day in range(5)
    ]
    return Provider(
        provider_id="paws-salon",
        name="Paws & Claws Salon",
        timezone=DEMO_TIMEZONE,
        capacity=2,
        rules=[
            *weekday_rules,
            RecurringRule(
                day_of_week=5, start_time=time(10, 0), end_time=time(14, 0),
                timezone=DEMO_TIMEZONE,
            ),
            DateException(date=date(2026, 12, 25), timezone=DEMO_TIMEZONE, reason="Holiday"),
            DateException(
                date=date(2026, 12, 24),
                timezone=DEMO_TIMEZONE,
                windows=[LocalWindow(start_time=time(9, 0), end_time=time(12, 0))],
                reason="Christmas Eve",
            ),
        ],
        resources={"grooming_table": Resource(resource_type="grooming_table", capacity=1)},
    )


def build_demo_store() -> InMemoryBookingStore:
    store = InMemoryBookingStore()
    store.add_provider(demo_provider())
    for service in DEMO_SERVICES:
        store.add_service(service)
    for pet in DEMO_PETS:
        store.add_pet(pet)
    return store
