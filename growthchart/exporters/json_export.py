"""
JSON export for the growth chart.

Saves and restores store snapshots as clean, human-readable JSON.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from growthchart.db import GrowthStore, StoreSnapshot
from growthchart.models import MeasurementType


def export_snapshot(
    source: GrowthStore | StoreSnapshot,
    output_path: Path | None = None,
    indent: int = 2,
    include_nulls: bool = False,
) -> str:
    """
    Export the store state to JSON.

    Args:
        source: A store or a snapshot taken from one
        output_path: Optional path to write the JSON file
        indent: JSON indentation level
        include_nulls: Whether to include null values in output

    Returns:
        JSON string representation of the snapshot
    """
    snapshot = source.snapshot() if isinstance(source, GrowthStore) else source
    json_str = snapshot.model_dump_json(indent=indent, exclude_none=not include_nulls)

    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_str, encoding="utf-8")

    return json_str


def load_snapshot(source: Path | str) -> StoreSnapshot:
    """
    Load a snapshot from a JSON file path or a JSON string.

    Raises:
        pydantic.ValidationError: If the JSON does not describe a snapshot.
    """
    if isinstance(source, Path):
        source = source.read_text(encoding="utf-8")
    return StoreSnapshot.model_validate_json(source)


def export_patient_summary(store: GrowthStore, patient_id: str) -> dict[str, Any] | None:
    """
    Summary of one patient (useful for listings/previews).

    Returns a dict with the patient's details and their latest value for
    each measurement, or None if the patient is unknown.
    """
    patient = store.get_patient(patient_id)
    if patient is None:
        return None

    records = store.records_for_patient(patient_id)
    latest: dict[str, dict[str, Any]] = {}
    for record in sorted(records, key=lambda r: (r.observation_date, r.age_months)):
        latest[record.display_name] = {
            "value": record.value,
            "unit": record.unit,
            "age_months": record.age_months,
            "date": record.observation_date.isoformat(),
        }

    return {
        "id": patient.id,
        "name": patient.name,
        "date_of_birth": patient.date_of_birth.isoformat() if patient.date_of_birth else None,
        "sex": patient.sex.value,
        "condition": patient.condition,
        "record_count": len(records),
        "bmi_count": sum(1 for r in records if r.measurement_type == MeasurementType.BMI),
        "latest": latest,
    }
