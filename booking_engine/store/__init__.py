from booking_engine.store.base import BookingStore, IndexKey, provider_key, resource_key
from booking_engine.store.memory import InMemoryBookingStore

__all__ = [
    "BookingStore", "InMemoryBookingStore", "IndexKey", "provider_key", "resource_key",
]
