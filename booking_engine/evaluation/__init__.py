from booking_engine.evaluation.schedule_audit import (
    AuditReport,
    ScheduleAuditor,
    Violation,
    ViolationKind,
)

__all__ = ["ScheduleAuditor", "AuditReport", "Violation", "ViolationKind"]
