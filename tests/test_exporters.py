"""
Tests for snapshot export and FHIR patient import.
"""

import json
from datetime import date

import pytest
from pydantic import ValidationError

from growthchart.db import GrowthStore
from growthchart.exporters import (
    export_patient_summary,
    export_snapshot,
    import_fhir_patient,
    load_snapshot,
    patient_from_fhir,
)
from growthchart.models import MeasurementType, Sex


@pytest.fixture
def populated_store(store, patient, make_record):
    store.add_record(make_record(12, 10.0, MeasurementType.WEIGHT, "kg", patient_id=patient.id))
    store.add_record(make_record(12, 75.0, patient_id=patient.id))
    store.add_record(make_record(
        13, 10.4, MeasurementType.WEIGHT, "kg",
        patient_id=patient.id, observation_date=date(2024, 2, 1),
    ))
    return store


@pytest.fixture
def fhir_patient():
    return {
        "resourceType": "Patient",
        "id": "abc123",
        "gender": "female",
        "birthDate": "2022-07-14",
        "name": [
            {"use": "nickname", "given": ["Jo"]},
            {"use": "official", "given": ["Joanna", "May"], "family": "Smith"},
        ],
    }


class TestSnapshotExport:
    """Test JSON snapshot export."""

    def test_export_is_valid_json(self, populated_store):
        data = json.loads(export_snapshot(populated_store))

        assert len(data["patients"]) == 1
        assert len(data["growth_records"]) == 4
        assert data["patients"][0]["date_of_birth"] == "2023-01-01"

    def test_bmi_unit_is_not_escaped(self, populated_store):
        assert "kg/m²" in export_snapshot(populated_store)

    def test_dates_are_iso_strings(self, populated_store):
        data = json.loads(export_snapshot(populated_store))

        assert {r["observation_date"] for r in data["growth_records"]} == {"2023-01-01", "2024-02-01"}

    def test_indent(self, populated_store):
        assert export_snapshot(populated_store, indent=4).startswith('{\n    "patients"')

    def test_nulls_excluded_by_default(self, populated_store):
        data = json.loads(export_snapshot(populated_store))
        assert "notes" not in data["growth_records"][0]

        data = json.loads(export_snapshot(populated_store, include_nulls=True))
        assert data["growth_records"][0]["notes"] is None

    def test_writes_file(self, populated_store, tmp_path):
        path = tmp_path / "out" / "snapshot.json"

        json_str = export_snapshot(populated_store, output_path=path)

        assert path.read_text(encoding="utf-8") == json_str

    def test_round_trip_through_file(self, populated_store, tmp_path):
        path = tmp_path / "snapshot.json"
        export_snapshot(populated_store, output_path=path)

        restored = GrowthStore.from_snapshot(load_snapshot(path))

        assert restored.records == populated_store.records
        assert restored.patients == populated_store.patients

    def test_load_from_string(self, populated_store):
        snapshot = load_snapshot(export_snapshot(populated_store.snapshot()))
        assert len(snapshot.growth_records) == 4

    def test_load_invalid(self):
        with pytest.raises(ValidationError):
            load_snapshot('{"patients": "nope"}')


class TestPatientSummary:
    def test_summary(self, populated_store, patient):
        summary = export_patient_summary(populated_store, patient.id)

        assert summary["name"] == "Test Patient"
        assert summary["sex"] == "male"
        assert summary["record_count"] == 4
        assert summary["bmi_count"] == 1
        assert summary["latest"]["Weight"]["value"] == 10.4
        assert summary["latest"]["BMI"]["value"] == 17.8

    def test_unknown_patient(self, store):
        assert export_patient_summary(store, "missing") is None


class TestFHIRImport:
    """Test FHIR Patient mapping."""

    def test_maps_fields(self, fhir_patient):
        patient = patient_from_fhir(fhir_patient)

        assert patient.id == "FHIR-abc123"
        assert patient.name == "Joanna May Smith"
        assert patient.date_of_birth == date(2022, 7, 14)
        assert patient.sex == Sex.FEMALE

    def test_first_name_when_no_official(self, fhir_patient):
        fhir_patient["name"] = [{"text": "Baby Smith"}]
        assert patient_from_fhir(fhir_patient).name == "Baby Smith"

    def test_missing_name_and_gender(self):
        patient = patient_from_fhir({"resourceType": "Patient", "id": "x"})

        assert patient.name == "Unknown FHIR Patient"
        assert patient.sex == Sex.UNKNOWN
        assert patient.date_of_birth is None

    def test_partial_birth_date_is_dropped(self, fhir_patient):
        fhir_patient["birthDate"] = "2022-07"
        assert patient_from_fhir(fhir_patient).date_of_birth is None

    def test_rejects_other_resources(self):
        with pytest.raises(ValueError):
            patient_from_fhir({"resourceType": "Observation", "id": "o1"})

    def test_rejects_missing_id(self):
        with pytest.raises(ValueError):
            patient_from_fhir({"resourceType": "Patient"})

    def test_import_adds_and_selects(self, store, fhir_patient):
        patient = import_fhir_patient(store, fhir_patient)

        assert store.get_patient("FHIR-abc123") == patient
        assert store.selected_patient_id == "FHIR-abc123"

    def test_reimport_updates_in_place(self, store, fhir_patient):
        import_fhir_patient(store, fhir_patient)
        fhir_patient["name"] = [{"use": "official", "given": ["Joanna"], "family": "Jones"}]

        patient = import_fhir_patient(store, fhir_patient)

        assert len(store.patients) == 1
        assert patient.name == "Joanna Jones"
