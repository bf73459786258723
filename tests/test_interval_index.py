"""Tests for the per-key interval index."""

from datetime import timedelta

import pytest

from booking_engine.errors import InvalidInput, NotFound
from booking_engine.scheduling.interval_index import IntervalIndex
from booking_engine.scheduling.intervals import TimeInterval
from tests.conftest import MONDAY, at, interval


@pytest.fixture
def index():
    idx = IntervalIndex(key=("groomer-1", None))
    idx.add("bk-1", interval(MONDAY, (9, 0), (10, 0)))
    idx.add("bk-2", interval(MONDAY, (11, 0), (12, 0)))
    return idx


class TestMutation:
    def test_add_and_contains(self, index):
        assert len(index) == 2
        assert "bk-1" in index
        assert "bk-3" not in index

    def test_entries_kept_in_start_order(self, index):
        index.add("bk-0", interval(MONDAY, (7, 0), (8, 0)))
        assert [entry.booking_id for entry in index] == ["bk-0", "bk-1", "bk-2"]

    def test_duplicate_id_rejected(self, index):
        with pytest.raises(InvalidInput):
            index.add("bk-1", interval(MONDAY, (14, 0), (15, 0)))

    def test_zero_quantity_rejected(self, index):
        with pytest.raises(InvalidInput):
            index.add("bk-9", interval(MONDAY, (14, 0), (15, 0)), quantity=0)

    def test_remove(self, index):
        entry = index.remove("bk-1")
        assert entry.booking_id == "bk-1"
        assert "bk-1" not in index
        assert not index.overlaps(interval(MONDAY, (9, 0), (10, 0)))

    def test_remove_unknown(self, index):
        with pytest.raises(NotFound):
            index.remove("nope")

    def test_remove_among_equal_starts(self):
        idx = IntervalIndex()
        idx.add("a", interval(MONDAY, (9, 0), (10, 0)))
        idx.add("b", interval(MONDAY, (9, 0), (9, 30)))
        idx.add("c", interval(MONDAY, (9, 0), (11, 0)))
        idx.remove("b")
        assert [entry.booking_id for entry in idx] == ["a", "c"]


class TestOverlapQueries:
    def test_overlap_detected(self, index):
        assert index.overlaps(interval(MONDAY, (9, 30), (10, 30)))

    def test_touching_end_is_free(self, index):
        assert not index.overlaps(interval(MONDAY, (10, 0), (11, 0)))

    def test_touching_start_is_free(self, index):
        assert not index.overlaps(interval(MONDAY, (8, 0), (9, 0)))

    def test_long_entry_found_from_far_start(self):
        idx = IntervalIndex()
        idx.add("long", interval(MONDAY, (6, 0), (18, 0)))
        idx.add("short", interval(MONDAY, (7, 0), (7, 15)))
        hits = idx.overlapping(interval(MONDAY, (16, 0), (16, 30)))
        assert [entry.booking_id for entry in hits] == ["long"]

    def test_overlapping_returns_start_order(self, index):
        hits = index.overlapping(interval(MONDAY, (8, 0), (13, 0)))
        assert [entry.booking_id for entry in hits] == ["bk-1", "bk-2"]

    def test_empty_index(self):
        idx = IntervalIndex()
        assert idx.overlapping(interval(MONDAY, (9, 0), (10, 0))) == []
        assert idx.max_occupancy(interval(MONDAY, (9, 0), (10, 0))) == 0


class TestCapacity:
    def test_max_occupancy_counts_simultaneous_only(self):
        idx = IntervalIndex()
        idx.add("a", interval(MONDAY, (9, 0), (10, 0)))
        idx.add("b", interval(MONDAY, (10, 0), (11, 0)))
        # Back-to-back bookings never overlap at an instant.
        assert idx.max_occupancy(interval(MONDAY, (9, 0), (11, 0))) == 1

    def test_max_occupancy_with_quantities(self):
        idx = IntervalIndex()
        idx.add("a", interval(MONDAY, (9, 0), (11, 0)), quantity=2)
        idx.add("b", interval(MONDAY, (10, 0), (12, 0)))
        assert idx.max_occupancy(interval(MONDAY, (9, 0), (12, 0))) == 3
        assert idx.max_occupancy(interval(MONDAY, (11, 0), (12, 0))) == 1

    def test_exclusive_capacity(self, index):
        assert not index.has_capacity(interval(MONDAY, (9, 30), (10, 30)), capacity=1)
        assert index.has_capacity(interval(MONDAY, (10, 0), (11, 0)), capacity=1)

    def test_shared_capacity(self, index):
        candidate = interval(MONDAY, (9, 30), (10, 30))
        assert index.has_capacity(candidate, capacity=2)
        index.add("bk-3", interval(MONDAY, (9, 45), (10, 15)))
        assert not index.has_capacity(candidate, capacity=2)
        assert index.has_capacity(candidate, capacity=3)

    def test_quantity_larger_than_capacity(self):
        idx = IntervalIndex()
        assert not idx.has_capacity(interval(MONDAY, (9, 0), (10, 0)), capacity=2, quantity=3)


class TestQueryBound:
    def _boarding(self):
        start = at(MONDAY, 9)
        return TimeInterval(start, start + timedelta(days=30))

    def test_bound_tracks_longest_entry(self):
        idx = IntervalIndex()
        idx.add("short", interval(MONDAY, (9, 0), (9, 30)))
        assert idx.max_length == timedelta(minutes=30)
        idx.add("long", self._boarding())
        assert idx.max_length == timedelta(days=30)

    def test_bound_shrinks_after_long_entry_removed(self):
        idx = IntervalIndex()
        idx.add("long", self._boarding())
        idx.add("short", interval(MONDAY, (9, 0), (9, 30)))
        idx.remove("long")
        assert idx.max_length == timedelta(minutes=30)

    def test_bound_resets_when_empty(self):
        idx = IntervalIndex()
        idx.add("long", self._boarding())
        idx.remove("long")
        assert idx.max_length == timedelta(0)

    def test_queries_still_correct_after_shrink(self):
        idx = IntervalIndex()
        idx.add("long", self._boarding())
        idx.add("a", interval(MONDAY, (9, 0), (12, 0)))
        idx.add("b", interval(MONDAY, (14, 0), (14, 30)))
        idx.remove("long")
        hits = idx.overlapping(interval(MONDAY, (11, 0), (14, 15)))
        assert [entry.booking_id for entry in hits] == ["a", "b"]
