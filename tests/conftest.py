import json
from datetime import date

import pytest

from growthchart.config import reset_config
from growthchart.db import GrowthStore
from growthchart.models import GrowthRecordCreate, LMSPoint, MeasurementType, Sex


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """
    Every test starts from default configuration.
    """
    for name in (
        "GROWTHCHART_UNITS",
        "GROWTHCHART_LOG_LEVEL",
        "GROWTHCHART_AGE_TOLERANCE",
        "GROWTHCHART_REFERENCE_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def store() -> GrowthStore:
    return GrowthStore()


@pytest.fixture
def patient(store):
    return store.add_patient("Test Patient", date_of_birth=date(2023, 1, 1), sex=Sex.MALE)


@pytest.fixture
def make_record():
    """
    Factory for unsaved growth records; defaults to a 75 cm height at 12 months.
    """
    def _make(
        age_months: float = 12,
        value: float = 75.0,
        measurement_type: MeasurementType = MeasurementType.HEIGHT,
        unit: str = "cm",
        patient_id: str = "test-patient",
        observation_date: date | None = None,
        **kwargs,
    ) -> GrowthRecordCreate:
        return GrowthRecordCreate(
            patient_id=patient_id,
            observation_date=observation_date or date(2023, 1, 1),
            age_months=age_months,
            measurement_type=measurement_type,
            value=value,
            unit=unit,
            **kwargs,
        )

    return _make


@pytest.fixture
def lms_table() -> list[LMSPoint]:
    return [
        LMSPoint(age=0, l=-0.45, m=49.92, s=0.038),
        LMSPoint(age=1, l=-0.30, m=54.71, s=0.037),
        LMSPoint(age=2, l=-0.19, m=58.43, s=0.036),
        LMSPoint(age=3, l=-0.12, m=61.45, s=0.035),
    ]


@pytest.fixture
def chart_payload() -> dict:
    """
    A length-for-age chart in the on-disk (camelCase) format.
    """
    return {
        "source": "WHO",
        "name": "Length-for-age Boys 0-3 months",
        "measurementType": "length_for_age",
        "sex": "male",
        "ageUnit": "months",
        "measurementUnit": "cm",
        "centilesAvailable": ["P3", "P50", "P97"],
        "lmsParametersAvailable": ["l", "m", "s"],
        "data": [
            {"age": 0, "l": 1, "m": 49.8842, "s": 0.03795, "P3": 46.3, "P50": 49.9, "P97": 53.4},
            {"age": 1, "l": 1, "m": 54.7244, "s": 0.03557, "P3": 51.1, "P50": 54.7, "P97": 58.4},
            {"age": 2, "l": 1, "m": 58.4249, "s": 0.03424, "P3": 54.7, "P50": 58.4, "P97": 62.2},
            {"age": 3, "l": 1, "m": 61.4292, "s": 0.03328, "P3": 57.6, "P50": 61.4, "P97": 65.3},
        ],
    }


@pytest.fixture
def chart_file(tmp_path, chart_payload):
    path = tmp_path / "lfa_boys.json"
    path.write_text(json.dumps(chart_payload))
    return path
