"""
Visit scheduling package: date generation, request validation, booking and storage.
"""

from .generator import (
    OPEN_ENDED_PERIOD_CAP,
    generate_visit_dates,
    generate_visit_datetimes,
    iter_visit_datetimes,
)
from .validation import ValidationIssue, validate_payload, validate_request
from .booking import (
    BookingError,
    EmptyScheduleError,
    InvalidVisitRequest,
    StorageError,
    VisitBooker,
)
from .store import VisitStore

__all__ = [
    "OPEN_ENDED_PERIOD_CAP",
    "generate_visit_dates",
    "generate_visit_datetimes",
    "iter_visit_datetimes",
    "ValidationIssue",
    "validate_payload",
    "validate_request",
    "BookingError",
    "EmptyScheduleError",
    "InvalidVisitRequest",
    "StorageError",
    "VisitBooker",
    "VisitStore",
]
