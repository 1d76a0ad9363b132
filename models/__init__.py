"""
Data models package for the Clinic Visit Scheduler.

This package exports the two pillars of the data architecture:
1. Demand (Frequency, TimeSlot, RecurrenceRequest)
2. Output (ScheduledVisit, VisitStatus)
"""

from .visit import (
    Frequency,
    TimeSlot,
    RecurrenceRequest,
    TIME_PATTERN
)

from .record import (
    ScheduledVisit,
    VisitStatus
)

__all__ = [
    # --- Demand Models ---
    "Frequency",
    "TimeSlot",
    "RecurrenceRequest",
    "TIME_PATTERN",

    # --- Output Models ---
    "ScheduledVisit",
    "VisitStatus",
]
