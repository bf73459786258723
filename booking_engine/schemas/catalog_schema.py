"""Catalog records the engine reads: providers, services, resources, pets."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from booking_engine.schemas.availability_schema import AvailabilityRule


class PetSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    GIANT = "giant"


class ServiceVariant(BaseModel):
    """Per-pet-size override of a service's duration and/or price."""

    duration_minutes: Optional[int] = Field(default=None, gt=0)
    price: Optional[Decimal] = None


class Service(BaseModel):
    """A bookable service offered by a provider."""

    service_id: str
    name: str
    duration_minutes: int = Field(gt=0)
    base_price: Decimal = Decimal("0")
    size_overrides: dict[PetSize, ServiceVariant] = Field(default_factory=dict)
    eligible_categories: set[str] = Field(default_factory=set)
    eligible_sizes: Optional[set[PetSize]] = None
    resource_type: Optional[str] = None
    resource_quantity: int = Field(default=1, gt=0)


class Resource(BaseModel):
    """A shared resource type and how many bookings may use it at once."""

    resource_type: str
    capacity: int = Field(gt=0)


class Provider(BaseModel):
    """A service provider with working hours and optional shared resources.

    ``capacity`` is the number of bookings the provider can serve at the
    same instant; 1 models a single exclusive provider.
    """

    provider_id: str
    name: str
    timezone: str
    capacity: int = Field(default=1, gt=0)
    rules: list[AvailabilityRule] = Field(default_factory=list)
    resources: dict[str, Resource] = Field(default_factory=dict)
    service_ids: set[str] = Field(default_factory=set)


class Pet(BaseModel):
    """Pet attributes used for service eligibility."""

    pet_id: str
    name: str = ""
    category: str
    size: PetSize
