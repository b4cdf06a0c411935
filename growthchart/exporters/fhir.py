"""
FHIR R4 Patient import.

Maps a FHIR Patient resource onto the internal Patient model.
Reference: https://www.hl7.org/fhir/R4/patient.html
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from growthchart.db import GrowthStore
from growthchart.models import Patient, Sex

logger = logging.getLogger(__name__)

FHIR_ID_PREFIX = "FHIR-"
UNKNOWN_NAME = "Unknown FHIR Patient"

GENDER_MAP = {
    "male": Sex.MALE,
    "female": Sex.FEMALE,
    "other": Sex.OTHER,
}


def _display_name(resource: dict[str, Any]) -> str:
    names = resource.get("name") or []
    if not names:
        return UNKNOWN_NAME
    primary = next((n for n in names if n.get("use") == "official"), names[0])
    given = " ".join(primary.get("given") or [])
    full = f"{given} {primary.get('family') or ''}".strip()
    return full or primary.get("text") or UNKNOWN_NAME


def _birth_date(resource: dict[str, Any]) -> date | None:
    raw = resource.get("birthDate")
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        # FHIR allows partial dates (YYYY or YYYY-MM)
        logger.warning("Ignoring birthDate %r that is not a full date", raw)
        return None


def patient_from_fhir(resource: dict[str, Any]) -> Patient:
    """
    Convert a FHIR Patient resource to a Patient.

    Raises:
        ValueError: If the resource is not a Patient or has no id.
    """
    if resource.get("resourceType") != "Patient":
        raise ValueError(f"Expected a FHIR Patient resource, got {resource.get('resourceType')!r}")
    if not resource.get("id"):
        raise ValueError("FHIR Patient resource has no id")

    return Patient(
        id=f"{FHIR_ID_PREFIX}{resource['id']}",
        name=_display_name(resource),
        date_of_birth=_birth_date(resource),
        sex=GENDER_MAP.get(resource.get("gender"), Sex.UNKNOWN),
    )


def import_fhir_patient(store: GrowthStore, resource: dict[str, Any]) -> Patient:
    """
    Add or refresh a FHIR patient in the store and select them.

    Returns:
        The stored patient.
    """
    mapped = patient_from_fhir(resource)
    if store.get_patient(mapped.id) is not None:
        patient = store.update_patient(
            mapped.id,
            name=mapped.name,
            date_of_birth=mapped.date_of_birth,
            sex=mapped.sex,
        )
    else:
        patient = store.add_patient(
            mapped.name,
            date_of_birth=mapped.date_of_birth,
            sex=mapped.sex,
            id=mapped.id,
        )
    store.select_patient(patient.id)
    return patient
