"""
Recurrence request data models for the Clinic Visit Scheduler.

These describe the 'Demand' side: how often a patient should be visited
and at which wall-clock times within each period.
"""

import re
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, ConfigDict
from datetime import date, time as time_type


TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


class Frequency(str, Enum):
    """Defines the recurrence pattern of a visit plan."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class TimeSlot(BaseModel):
    """
    Template for one visit within a period.

    Only the selector matching the plan's frequency is consulted:
    daily slots use `time` alone, weekly slots add `day_of_week`,
    monthly slots add `day_of_month`.
    """

    time: str = Field(description="Wall-clock start time, 24-hour 'HH:MM'")

    day_of_week: Optional[int] = Field(
        default=None,
        ge=0,
        le=6,
        alias="dayOfWeek",
        description="0=Sunday, 6=Saturday. Only used by the weekly pattern."
    )

    day_of_month: Optional[int] = Field(
        default=None,
        ge=1,
        le=31,
        alias="dayOfMonth",
        description="1-31. Clamped to the last day of shorter months. Only used by the monthly pattern."
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator('time')
    @classmethod
    def validate_time_format(cls, v):
        if not TIME_PATTERN.match(v):
            raise ValueError(f"Invalid time '{v}', expected HH:MM")
        return v

    def as_time(self) -> time_type:
        """Parse the HH:MM string into a `datetime.time`."""
        hours, minutes = self.time.split(":")
        return time_type(int(hours), int(minutes))


class RecurrenceRequest(BaseModel):
    """
    Input of the visit date generator.

    At most one termination mode should be set. With neither, the plan is
    open-ended and generation is capped by the scheduler.
    """

    frequency: Frequency = Field(description="Recurrence pattern")
    visits_per_period: int = Field(
        ge=1,
        alias="visitsPerPeriod",
        description="Number of visits in each day/week/month"
    )
    start_date: date = Field(alias="startDate", description="The first period begins on this date")
    time_slots: List[TimeSlot] = Field(
        default_factory=list,
        alias="timeSlots",
        description="One entry per visit within a period"
    )

    # --- Termination ---
    end_date: Optional[date] = Field(
        default=None,
        alias="endDate",
        description="Inclusive upper bound"
    )
    occurrences: Optional[int] = Field(
        default=None,
        ge=1,
        description="Number of PERIODS to generate (not individual visits)"
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True, json_schema_extra={
        "example": {
            "frequency": "weekly",
            "visitsPerPeriod": 2,
            "startDate": "2024-01-10",
            "timeSlots": [
                {"dayOfWeek": 1, "time": "09:00"},
                {"dayOfWeek": 4, "time": "14:30"}
            ],
            "occurrences": 8
        }
    })

    @property
    def is_open_ended(self) -> bool:
        return self.end_date is None and self.occurrences is None
