from datetime import date, time

import pytest
from pydantic import ValidationError

from models import Frequency, RecurrenceRequest, TimeSlot


def test_time_slot_accepts_wire_and_python_names():
    assert TimeSlot(time="09:00", dayOfWeek=3).day_of_week == 3
    assert TimeSlot(time="09:00", day_of_month=31).day_of_month == 31


@pytest.mark.parametrize("value", ["24:00", "9", "09:60", "nine"])
def test_time_slot_rejects_malformed_time(value):
    with pytest.raises(ValidationError):
        TimeSlot(time=value)


@pytest.mark.parametrize("field, value", [("day_of_week", 7), ("day_of_week", -1), ("day_of_month", 0), ("day_of_month", 32)])
def test_time_slot_rejects_out_of_range_days(field, value):
    with pytest.raises(ValidationError):
        TimeSlot(time="09:00", **{field: value})


def test_as_time_parses_single_digit_hour():
    assert TimeSlot(time="7:05").as_time() == time(7, 5)


def test_request_from_json_payload():
    request = RecurrenceRequest.model_validate({
        "frequency": "monthly",
        "visitsPerPeriod": 1,
        "startDate": "2024-01-01",
        "timeSlots": [{"dayOfMonth": 31, "time": "10:00"}],
        "occurrences": 2,
    })
    assert request.frequency == Frequency.MONTHLY
    assert request.start_date == date(2024, 1, 1)
    assert not request.is_open_ended


def test_request_is_frozen():
    request = RecurrenceRequest(frequency="daily", visits_per_period=1, start_date=date(2024, 1, 1))
    assert request.is_open_ended
    with pytest.raises(ValidationError):
        request.occurrences = 3
