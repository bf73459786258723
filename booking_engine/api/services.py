"""Service catalog helpers: eligibility and per-pet-size terms."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Optional, Union

from booking_engine.errors import Ineligible, InvalidInput, NotFound
from booking_engine.schemas.catalog_schema import PetSize, Provider, Resource, Service
from booking_engine.store.base import BookingStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceTerms:
    """Effective duration and price of a service for one pet size."""

    duration: timedelta
    price: Decimal


def normalize_category(value: str) -> str:
    """Normalize a pet category for comparison.

    Examples:
        >>> normalize_category("  Dog ")
        'dog'
    """
    return value.strip().lower()


def parse_pet_size(value: Union[PetSize, str]) -> PetSize:
    if isinstance(value, PetSize):
        return value
    try:
        return PetSize(value.strip().lower())
    except (ValueError, AttributeError):
        valid = [size.value for size in PetSize]
        raise InvalidInput(f"Unknown pet size {value!r}. Valid sizes: {valid}") from None


def get_service_details(store: BookingStore, service_id: str) -> dict:
    """Get full details for a specific service."""
    service = store.get_service(service_id)
    return {
        "id": service.service_id,
        "name": service.name,
        "duration_minutes": service.duration_minutes,
        "base_price": str(service.base_price),
        "eligible_categories": sorted(service.eligible_categories),
        "resource_type": service.resource_type,
    }


def ensure_offered(provider: Provider, service: Service) -> None:
    """An empty ``service_ids`` set means the provider offers every service."""
    if provider.service_ids and service.service_id not in provider.service_ids:
        raise NotFound(
            f"Provider {provider.provider_id} does not offer service {service.service_id}",
            provider_id=provider.provider_id,
            service_id=service.service_id,
        )


def check_eligibility(service: Service, category: str, size: Union[PetSize, str]) -> PetSize:
    """
    Verify the service accepts a pet of this category and size.

    Returns:
        The parsed pet size.

    Raises:
        Ineligible: category or size not accepted.
        InvalidInput: blank category or unknown size.
    """
    if not category or not category.strip():
        raise InvalidInput("Pet category is required")
    pet_size = parse_pet_size(size)

    wanted = normalize_category(category)
    accepted = {normalize_category(c) for c in service.eligible_categories}
    if accepted and wanted not in accepted:
        raise Ineligible(
            f"{service.name} does not accept {wanted} pets",
            service_id=service.service_id,
            category=wanted,
        )
    if service.eligible_sizes is not None and pet_size not in service.eligible_sizes:
        raise Ineligible(
            f"{service.name} does not accept {pet_size.value} pets",
            service_id=service.service_id,
            size=pet_size.value,
        )
    return pet_size


def resolve_service_terms(service: Service, size: PetSize) -> ServiceTerms:
    """Apply any per-size override to the service's base duration and price."""
    variant = service.size_overrides.get(size)
    duration = service.duration_minutes
    price = service.base_price
    if variant is not None:
        if variant.duration_minutes is not None:
            duration = variant.duration_minutes
        if variant.price is not None:
            price = variant.price
        logger.debug("%s: %s override -> %d min, %s", service.service_id, size.value, duration, price)
    return ServiceTerms(duration=timedelta(minutes=duration), price=price)


def required_resource(provider: Provider, service: Service) -> Optional[Resource]:
    """The provider resource a service needs, checked against its quantity."""
    if not service.resource_type:
        return None
    resource = provider.resources.get(service.resource_type)
    if resource is None:
        raise NotFound(
            f"Provider {provider.provider_id} has no resource '{service.resource_type}'",
            provider_id=provider.provider_id,
            resource_type=service.resource_type,
        )
    if service.resource_quantity > resource.capacity:
        raise InvalidInput(
            f"Service {service.service_id} needs {service.resource_quantity} "
            f"'{resource.resource_type}' but capacity is {resource.capacity}",
            service_id=service.service_id,
            resource_type=resource.resource_type,
        )
    return resource
