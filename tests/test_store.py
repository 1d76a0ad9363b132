from datetime import date, datetime

import pytest

from models import Frequency, ScheduledVisit, TimeSlot, VisitStatus
from scheduler import VisitStore


def _visit(visit_id, patient_id="patient-1"):
    return ScheduledVisit(
        id=visit_id,
        patient_id=patient_id,
        visitor_id="user-1",
        frequency=Frequency.DAILY,
        visits_per_period=1,
        start_date=date(2024, 1, 1),
        occurrences=2,
        time_slots=[TimeSlot(time="09:00")],
        generated_dates=["2024-01-01T09:00", "2024-01-02T09:00"],
        created_at=datetime(2024, 1, 1, 8, 0),
    )


def test_missing_file_reads_as_empty(store):
    assert store.get_all() == []
    assert store.get_by_id("visit-1") is None


def test_add_and_query(store):
    assert store.add(_visit("visit-1"))
    assert store.add(_visit("visit-2", patient_id="patient-2"))

    assert [v.id for v in store.get_all()] == ["visit-1", "visit-2"]
    assert store.get_by_id("visit-2").patient_id == "patient-2"
    assert [v.id for v in store.get_by_patient_id("patient-1")] == ["visit-1"]


def test_update_merges_changes(store):
    store.add(_visit("visit-1"))
    assert store.update("visit-1", status=VisitStatus.COMPLETED)
    assert store.get_by_id("visit-1").status == VisitStatus.COMPLETED
    assert store.update("visit-404", status=VisitStatus.COMPLETED) is False


def test_delete_variants(store):
    store.add(_visit("visit-1"))
    store.add(_visit("visit-2"))
    store.add(_visit("visit-3", patient_id="patient-2"))

    assert store.delete("visit-1")
    assert [v.id for v in store.get_all()] == ["visit-2", "visit-3"]

    assert store.delete_by_patient_id("patient-1")
    assert [v.id for v in store.get_all()] == ["visit-3"]

    assert store.clear()
    assert store.get_all() == []


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "visits.json"
    path.write_text("{not json")
    assert VisitStore(str(path)).get_all() == []


def test_invalid_records_are_skipped(tmp_path):
    path = tmp_path / "visits.json"
    path.write_text('[{"id": "broken"}]')
    store = VisitStore(str(path))
    store.add(_visit("visit-1"))
    assert [v.id for v in store.get_all()] == ["visit-1"]


def test_write_failure_returns_false(tmp_path):
    # A directory in place of the file makes open() fail
    path = tmp_path / "visits.json"
    path.mkdir()
    assert VisitStore(str(path)).add(_visit("visit-1")) is False


def test_export_then_import_into_fresh_store(store, tmp_path):
    store.add(_visit("visit-1"))
    exported = store.export_data()
    assert exported["visits"][0]["generatedDates"] == ["2024-01-01T09:00", "2024-01-02T09:00"]
    assert "exportedAt" in exported

    other = VisitStore(str(tmp_path / "restored" / "visits.json"))
    assert other.import_data(exported)
    assert [v.id for v in other.get_all()] == ["visit-1"]


@pytest.mark.parametrize("data, expected", [
    ({}, True),
    ({"visits": [{"id": "broken"}]}, False),
])
def test_import_edge_cases(store, data, expected):
    assert store.import_data(data) is expected


def test_update_rejects_unknown_fields(store):
    store.add(_visit("visit-1"))
    assert store.update("visit-1", stauts=VisitStatus.COMPLETED) is False
    assert store.get_by_id("visit-1").status == VisitStatus.PENDING
