from datetime import date

import pytest

from models import Frequency, RecurrenceRequest, TimeSlot
from scheduler import VisitBooker, VisitStore


def make_request(frequency, slots, start, end=None, occurrences=None, visits_per_period=None):
    return RecurrenceRequest(
        frequency=Frequency(frequency),
        visits_per_period=visits_per_period if visits_per_period is not None else max(len(slots), 1),
        start_date=start,
        time_slots=[TimeSlot(**s) for s in slots],
        end_date=end,
        occurrences=occurrences,
    )


@pytest.fixture()
def weekly_request():
    # Mon 09:00 and Thu 14:30, starting Wednesday 2024-01-10
    return make_request(
        "weekly",
        [{"day_of_week": 1, "time": "09:00"}, {"day_of_week": 4, "time": "14:30"}],
        date(2024, 1, 10),
        occurrences=3,
    )


@pytest.fixture()
def store(tmp_path):
    return VisitStore(str(tmp_path / "visits.json"))


@pytest.fixture()
def booker(store):
    return VisitBooker(store)


@pytest.fixture()
def build_request():
    return make_request
