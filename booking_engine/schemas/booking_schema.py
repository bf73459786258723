"""Booking records, requests and responses."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from booking_engine.scheduling.intervals import TimeInterval


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


OCCUPYING_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.CONFIRMED, BookingStatus.COMPLETED}
)


class Booking(BaseModel):
    """A committed booking. Its start/end never change once confirmed."""

    booking_id: str
    provider_id: str
    service_id: str
    pet_id: str
    start: datetime
    end: datetime
    status: BookingStatus
    idempotency_key: str
    resource_type: Optional[str] = None
    resource_quantity: int = 1
    notes: Optional[str] = None
    price_snapshot: Decimal = Decimal("0")
    created_at: datetime
    updated_at: datetime

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start, self.end)

    @property
    def occupies(self) -> bool:
        return self.status in OCCUPYING_STATUSES


class BookingRequest(BaseModel):
    """Validated create-booking input."""

    provider_id: str = Field(min_length=1)
    service_id: str = Field(min_length=1)
    pet_id: str = Field(min_length=1)
    start: datetime
    idempotency_key: str = Field(min_length=1, max_length=128)
    notes: Optional[str] = Field(default=None, max_length=2000)


class ErrorDetail(BaseModel):
    """Structured error returned instead of raising across the API boundary."""

    code: str
    message: str
    retryable: bool = False
    details: dict[str, Any] = Field(default_factory=dict)


class BookingResponse(BaseModel):
    """Create/cancel booking result."""

    success: bool
    booking: Optional[Booking] = None
    replayed: bool = False
    error: Optional[ErrorDetail] = None


class SlotListResponse(BaseModel):
    """Available start instants per provider-local calendar date."""

    success: bool = True
    provider_id: str = ""
    service_id: str = ""
    timezone: str = "UTC"
    slots: dict[str, list[str]] = Field(default_factory=dict)
    error: Optional[ErrorDetail] = None
