from booking_engine.api.availability import alist_slots, find_available_slots, list_slots
from booking_engine.api.booking import (
    acreate_booking,
    cancel_booking,
    complete_booking,
    create_booking,
    get_booking,
    mark_no_show,
    place_booking,
)

__all__ = [
    "list_slots", "alist_slots", "find_available_slots",
    "create_booking", "acreate_booking", "place_booking",
    "cancel_booking", "complete_booking", "mark_no_show", "get_booking",
]
