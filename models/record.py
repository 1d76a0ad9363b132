"""
Persisted visit record for the Clinic Visit Scheduler.

This module defines the 'Output' handed to the record store:
a booked recurrence plus every concrete visit timestamp it produced.
"""

from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime

from .visit import Frequency, TimeSlot


class VisitStatus(str, Enum):
    """Status of a scheduled visit plan."""
    PENDING = "pending"
    COMPLETED = "completed"


class ScheduledVisit(BaseModel):
    """
    A committed visit plan for one patient.
    """

    # --- Identity ---
    id: str = Field(description="Opaque record id, e.g. 'visit-<uuid>'")
    patient_id: str = Field(alias="patientId", description="Patient being visited")
    visitor_id: str = Field(alias="visitorId", description="Clinician doing the visits")

    # --- Recurrence (as requested) ---
    frequency: Frequency
    visits_per_period: int = Field(ge=1, alias="visitsPerPeriod")
    start_date: date = Field(alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    occurrences: Optional[int] = Field(default=None, ge=1)
    time_slots: List[TimeSlot] = Field(default_factory=list, alias="timeSlots")

    # --- Generated Output ---
    generated_dates: List[str] = Field(
        default_factory=list,
        alias="generatedDates",
        description="Sorted ISO-8601 visit timestamps"
    )

    created_at: datetime = Field(alias="createdAt")
    status: VisitStatus = Field(default=VisitStatus.PENDING, description="Current state")

    model_config = ConfigDict(populate_by_name=True, json_schema_extra={
        "example": {
            "id": "visit-3f1c2a9e-5d4b-4c55-9a51-0d6f2b7e9c10",
            "patientId": "patient-001",
            "visitorId": "user-007",
            "frequency": "monthly",
            "visitsPerPeriod": 1,
            "startDate": "2024-01-01",
            "occurrences": 2,
            "timeSlots": [{"dayOfMonth": 31, "time": "10:00"}],
            "generatedDates": ["2024-01-31T10:00", "2024-02-29T10:00"],
            "createdAt": "2024-01-01T08:15:00",
            "status": "pending"
        }
    })

    @property
    def first_visit(self) -> Optional[str]:
        return self.generated_dates[0] if self.generated_dates else None

    @property
    def last_visit(self) -> Optional[str]:
        return self.generated_dates[-1] if self.generated_dates else None
