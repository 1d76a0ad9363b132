"""
Visit Booking.

Glue between a submitted plan and the record store:
validate -> generate dates -> reject empty schedules -> persist.
"""

import logging
import uuid
from datetime import datetime
from typing import Iterable, List

from models import RecurrenceRequest, ScheduledVisit, VisitStatus
from .generator import OPEN_ENDED_PERIOD_CAP, format_timestamp, generate_visit_datetimes
from .store import VisitStore
from .validation import ValidationIssue, issues_as_dict, validate_request

logger = logging.getLogger(__name__)


class BookingError(ValueError):
    """Base class for plans that cannot be booked."""


class InvalidVisitRequest(BookingError):
    def __init__(self, issues: List[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(f"{i.field}: {i.message}" for i in issues))

    @property
    def errors(self):
        return issues_as_dict(self.issues)


class EmptyScheduleError(BookingError):
    pass


class StorageError(BookingError):
    pass


class VisitBooker:
    """
    Books recurring visit plans into a VisitStore.
    """

    def __init__(self, store: VisitStore, period_cap: int = OPEN_ENDED_PERIOD_CAP):
        self.store = store
        self.period_cap = period_cap

    def preview(self, request: RecurrenceRequest) -> List[str]:
        """Validate and generate without persisting anything."""
        issues = validate_request(request)
        if issues:
            raise InvalidVisitRequest(issues)
        return [format_timestamp(m) for m in generate_visit_datetimes(request, self.period_cap)]

    def book(self, request: RecurrenceRequest, patient_id: str, visitor_id: str) -> ScheduledVisit:
        """
        Turn a plan into a stored ScheduledVisit.
        Raises InvalidVisitRequest, EmptyScheduleError or StorageError.
        """
        generated = self.preview(request)
        if not generated:
            logger.warning(f"Plan for patient {patient_id} produced no visits")
            raise EmptyScheduleError("No visits could be generated with the provided parameters")

        visit = ScheduledVisit(
            id=f"visit-{uuid.uuid4()}",
            patient_id=patient_id,
            visitor_id=visitor_id,
            frequency=request.frequency,
            visits_per_period=request.visits_per_period,
            start_date=request.start_date,
            end_date=request.end_date,
            occurrences=request.occurrences,
            time_slots=request.time_slots,
            generated_dates=generated,
            created_at=datetime.now()
        )

        if not self.store.add(visit):
            raise StorageError("Failed to save visit")

        logger.info(
            f"Booked {visit.id}: {len(generated)} {request.frequency.value} visit(s) "
            f"from {visit.first_visit} to {visit.last_visit}"
        )
        return visit

    def complete(self, visit_ids: Iterable[str]) -> List[str]:
        """Mark plans as completed. Returns the ids that were actually updated."""
        updated = []
        for visit_id in visit_ids:
            if self.store.update(visit_id, status=VisitStatus.COMPLETED):
                updated.append(visit_id)
            else:
                logger.warning(f"Visit {visit_id} not found; cannot mark completed")
        return updated
