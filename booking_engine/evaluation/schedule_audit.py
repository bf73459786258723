"""
Schedule audit for committed bookings.

Replays every occupying booking of a provider into fresh interval indexes
and reports any instant where capacity is exceeded, any drift between the
store's live indexes and its booking records, and utilization against the
provider's resolved open hours.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from booking_engine.scheduling.availability import open_minutes, resolve_availability
from booking_engine.scheduling.interval_index import IntervalIndex
from booking_engine.schemas.booking_schema import OCCUPYING_STATUSES, Booking
from booking_engine.store.base import (
    BookingStore,
    IndexKey,
    booking_index_keys,
    index_quantity,
)
from booking_engine.utils import get_timezone

logger = logging.getLogger(__name__)


class ViolationKind(str, Enum):
    CAPACITY_EXCEEDED = "capacity_exceeded"
    INDEX_DRIFT = "index_drift"


@dataclass
class Violation:
    """A single invariant breach with evidence."""

    kind: ViolationKind
    key: IndexKey
    booking_id: str
    evidence: str


@dataclass
class AuditReport:
    """Audit result for one provider."""

    provider_id: str
    status_counts: dict[str, int] = field(default_factory=dict)
    violations: list[Violation] = field(default_factory=list)
    occupied_minutes: int = 0
    open_minutes: int = 0

    @property
    def ok(self) -> bool:
        return not self.violations

    @property
    def utilization(self) -> float:
        if self.open_minutes <= 0:
            return 0.0
        return self.occupied_minutes / self.open_minutes


class ScheduleAuditor:
    """Checks committed bookings against capacity invariants."""

    def audit(
        self,
        store: BookingStore,
        provider_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AuditReport:
        provider = store.get_provider(provider_id)
        bookings = store.list_bookings(provider_id)
        occupying = [b for b in bookings if b.status in OCCUPYING_STATUSES]

        report = AuditReport(
            provider_id=provider_id,
            status_counts=dict(Counter(b.status.value for b in bookings)),
        )

        capacities: dict[IndexKey, int] = {(provider_id, None): provider.capacity}
        for resource in provider.resources.values():
            capacities[(provider_id, resource.resource_type)] = resource.capacity

        replayed: dict[IndexKey, IntervalIndex] = {}
        for booking in occupying:
            for key in booking_index_keys(booking):
                index = replayed.setdefault(key, IntervalIndex(key=key))
                quantity = index_quantity(booking, key)
                capacity = capacities.get(key, 1)
                if not index.has_capacity(booking.interval, capacity, quantity):
                    report.violations.append(Violation(
                        kind=ViolationKind.CAPACITY_EXCEEDED,
                        key=key,
                        booking_id=booking.booking_id,
                        evidence=(
                            f"{booking.interval} needs {quantity} unit(s) but peak "
                            f"occupancy is already {index.max_occupancy(booking.interval)} "
                            f"of {capacity}"
                        ),
                    ))
                index.add(booking.booking_id, booking.interval, quantity)

        for key in capacities:
            expected = {entry.booking_id for entry in replayed.get(key, ())}
            live = {entry.booking_id for entry in store.index_for(key)}
            for booking_id in sorted(expected ^ live):
                where = "missing from" if booking_id in expected else "stale in"
                report.violations.append(Violation(
                    kind=ViolationKind.INDEX_DRIFT,
                    key=key,
                    booking_id=booking_id,
                    evidence=f"Booking {booking_id} is {where} the live index",
                ))

        if start_date is not None and end_date is not None:
            report.open_minutes = provider.capacity * open_minutes(
                resolve_availability(provider.rules, start_date, end_date, provider.timezone)
            )
            report.occupied_minutes = self._occupied_minutes(
                occupying, provider.timezone, start_date, end_date
            )

        if report.violations:
            logger.error(
                "Audit of provider %s found %d violation(s)",
                provider_id, len(report.violations),
            )
        return report

    @staticmethod
    def _occupied_minutes(
        bookings: list[Booking], tz_name: str, start_date: date, end_date: date
    ) -> int:
        tz = get_timezone(tz_name)
        total = timedelta()
        for booking in bookings:
            local_day = booking.start.astimezone(tz).date()
            if start_date <= local_day < end_date:
                total += booking.interval.duration
        return int(total.total_seconds() // 60)

    def format_report(self, report: AuditReport) -> str:
        """Format an audit report into a human-readable string."""
        lines = [
            f"SCHEDULE AUDIT: {report.provider_id}",
            f"  Result: {'PASS' if report.ok else 'FAIL'}",
        ]
        if report.status_counts:
            lines.append("  Bookings by status:")
            for status, count in sorted(report.status_counts.items()):
                lines.append(f"    {status}: {count}")
        if report.open_minutes:
            lines.append(
                f"  Utilization: {report.occupied_minutes}/{report.open_minutes} min "
                f"({report.utilization:.0%})"
            )
        for violation in report.violations:
            lines.append(
                f"  [{violation.kind.value}] {violation.booking_id}: {violation.evidence}"
            )
        return "\n".join(lines)
