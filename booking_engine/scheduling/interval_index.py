"""
Interval index over committed bookings for one (provider, resource) key.

Entries are kept sorted by start. A query only inspects entries whose start
falls in ``(candidate.start - longest_entry, candidate.end)``, located by
binary search, so its cost tracks the bookings near the candidate rather
than the whole booking history. The bound is recomputed on removal, so it
shrinks once a long booking is cancelled. While a long booking (a multi-day
boarding stay, say) is live, every query on that key still scans that span.

Writers (the commit coordinator, under its per-key lock) publish a new
immutable snapshot on every change. Readers take one snapshot and never
lock, so slot listing sees a consistent, possibly stale, view.

Usage:
    index = IntervalIndex(key=("prov-1", None))
    index.add("bk-1", interval)
    index.overlaps(candidate)                      # exclusive check
    index.has_capacity(candidate, capacity=3)      # shared resource check
"""

import logging
from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Hashable, Iterator, Optional

from booking_engine.errors import InvalidInput, NotFound
from booking_engine.scheduling.intervals import TimeInterval

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexEntry:
    """One occupying booking."""

    booking_id: str
    interval: TimeInterval
    quantity: int = 1


@dataclass(frozen=True)
class _Snapshot:
    starts: tuple[datetime, ...] = ()
    entries: tuple[IndexEntry, ...] = ()
    max_length: timedelta = timedelta(0)
    by_id: dict[str, IndexEntry] = field(default_factory=dict)


class IntervalIndex:
    """Sorted-interval structure answering overlap and occupancy queries."""

    def __init__(self, key: Optional[Hashable] = None) -> None:
        self.key = key
        self._snapshot = _Snapshot()

    def __len__(self) -> int:
        return len(self._snapshot.entries)

    def __contains__(self, booking_id: object) -> bool:
        return booking_id in self._snapshot.by_id

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._snapshot.entries)

    @property
    def max_length(self) -> timedelta:
        """Duration of the longest stored interval; bounds every query."""
        return self._snapshot.max_length

    # ------------------------------------------------------------------ #
    # Mutation (coordinator's exclusive section only)
    # ------------------------------------------------------------------ #

    def add(self, booking_id: str, interval: TimeInterval, quantity: int = 1) -> IndexEntry:
        snap = self._snapshot
        if booking_id in snap.by_id:
            raise InvalidInput(f"Booking {booking_id} is already indexed", booking_id=booking_id)
        if quantity < 1:
            raise InvalidInput(f"Quantity must be >= 1, got {quantity}")

        entry = IndexEntry(booking_id=booking_id, interval=interval, quantity=quantity)
        pos = bisect_right(snap.starts, interval.start)
        self._snapshot = _Snapshot(
            starts=snap.starts[:pos] + (interval.start,) + snap.starts[pos:],
            entries=snap.entries[:pos] + (entry,) + snap.entries[pos:],
            max_length=max(snap.max_length, interval.duration),
            by_id={**snap.by_id, booking_id: entry},
        )
        logger.debug("Indexed %s on %s: %s", booking_id, self.key, interval)
        return entry

    def remove(self, booking_id: str) -> IndexEntry:
        snap = self._snapshot
        entry = snap.by_id.get(booking_id)
        if entry is None:
            raise NotFound(f"Booking {booking_id} is not indexed", booking_id=booking_id)

        lo = bisect_left(snap.starts, entry.interval.start)
        hi = bisect_right(snap.starts, entry.interval.start)
        pos = next(i for i in range(lo, hi) if snap.entries[i].booking_id == booking_id)

        entries = snap.entries[:pos] + snap.entries[pos + 1:]
        by_id = dict(snap.by_id)
        del by_id[booking_id]
        self._snapshot = _Snapshot(
            starts=snap.starts[:pos] + snap.starts[pos + 1:],
            entries=entries,
            max_length=max((e.interval.duration for e in entries), default=timedelta(0)),
            by_id=by_id,
        )
        logger.debug("Removed %s from %s", booking_id, self.key)
        return entry

    # ------------------------------------------------------------------ #
    # Queries (lock-free)
    # ------------------------------------------------------------------ #

    def overlapping(self, interval: TimeInterval) -> list[IndexEntry]:
        """Entries whose interval overlaps ``interval``, in start order."""
        snap = self._snapshot
        if not snap.entries:
            return []
        lo = bisect_right(snap.starts, interval.start - snap.max_length)
        hi = bisect_left(snap.starts, interval.end)
        return [
            entry for entry in snap.entries[lo:hi]
            if entry.interval.end > interval.start
        ]

    def overlaps(self, interval: TimeInterval) -> bool:
        return bool(self.overlapping(interval))

    def max_occupancy(self, interval: TimeInterval) -> int:
        """Peak simultaneous quantity in use at any instant of ``interval``."""
        events: list[tuple[datetime, int, int]] = []
        for entry in self.overlapping(interval):
            events.append((max(entry.interval.start, interval.start), 1, entry.quantity))
            events.append((min(entry.interval.end, interval.end), 0, -entry.quantity))

        # Half-open: at equal instants, releases (0) sort before acquisitions (1).
        events.sort(key=lambda event: (event[0], event[1]))
        current = peak = 0
        for _, _, delta in events:
            current += delta
            peak = max(peak, current)
        return peak

    def has_capacity(self, interval: TimeInterval, capacity: int, quantity: int = 1) -> bool:
        """True when ``quantity`` more units fit under ``capacity`` over ``interval``.

        With ``capacity == 1`` this is the exclusive no-overlap check.
        """
        if quantity > capacity:
            return False
        return self.max_occupancy(interval) + quantity <= capacity
