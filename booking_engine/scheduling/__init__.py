"""
Scheduling engine core:
- Interval arithmetic (intervals.py)
- Availability resolution (availability.py)
- Slot generation (slots.py)
- Interval index (interval_index.py)
- Conflict filtering (conflicts.py)
- Booking lifecycle (lifecycle.py)
- Commit coordination (commit.py)
"""
