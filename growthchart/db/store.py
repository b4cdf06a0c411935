"""
In-memory store for patients and their growth records.

The store owns the record collection and keeps the derived BMI records
consistent with it. Every public mutation builds the next state in full and
swaps it in with a single assignment, so a reader never sees a weight or
height committed without its BMI consequence.
"""

import logging
import math
from collections.abc import Mapping
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field

from growthchart.config import get_config
from growthchart.exceptions import DerivedRecordError, MissingPatientError, PatientNotFoundError
from growthchart.growth.calculations import calculate_bmi
from growthchart.growth.units import convert_to_metric_for_calc
from growthchart.models import (
  BMI_HEIGHT_TYPES,
  BMI_SOURCE_TYPES,
  BMI_WEIGHT_TYPES,
  AppSettings,
  GrowthRecord,
  GrowthRecordCreate,
  MeasurementType,
  Patient,
  Sex,
  Unit,
)

logger = logging.getLogger(__name__)

# Annotations a caller may still edit on a derived BMI record
BMI_EDITABLE_FIELDS = frozenset({"notes", "intervention_type", "intervention_details"})


class StoreSnapshot(BaseModel):
  """Serializable state of a GrowthStore."""

  patients: list[Patient] = Field(default_factory=list)
  growth_records: list[GrowthRecord] = Field(default_factory=list)
  settings: AppSettings = Field(default_factory=AppSettings)
  selected_patient_id: Optional[str] = None


class GrowthStore:
  """
  Patients, growth records, selection and settings.

  BMI records are never written directly: adding a weight, height or
  length derives or refreshes the BMI at that (patient, age), and deleting
  one removes it.
  """

  def __init__(self, snapshot: Optional[StoreSnapshot] = None, age_tolerance: Optional[float] = None):
    """
    Initialize the store.

    Args:
      snapshot: State to start from. Empty if None.
      age_tolerance: Months within which two records count as the same age.
        Defaults to the configured tolerance (0, exact match).
    """
    snapshot = snapshot or StoreSnapshot()
    self._patients: list[Patient] = list(snapshot.patients)
    self._records: list[GrowthRecord] = list(snapshot.growth_records)
    self._settings: AppSettings = snapshot.settings
    self._selected_patient_id: Optional[str] = snapshot.selected_patient_id
    if age_tolerance is None:
      age_tolerance = get_config().age_match_tolerance
    self._age_tolerance = age_tolerance

  @classmethod
  def from_snapshot(cls, snapshot: StoreSnapshot, **kwargs) -> "GrowthStore":
    return cls(snapshot=snapshot, **kwargs)

  def snapshot(self) -> StoreSnapshot:
    """Current state as a snapshot."""
    return StoreSnapshot(
      patients=list(self._patients),
      growth_records=list(self._records),
      settings=self._settings,
      selected_patient_id=self._selected_patient_id,
    )

  # -------------------------------------------------------------------------
  # Patients
  # -------------------------------------------------------------------------

  @property
  def patients(self) -> list[Patient]:
    return list(self._patients)

  def get_patient(self, patient_id: str) -> Optional[Patient]:
    """Get patient by ID."""
    return next((p for p in self._patients if p.id == patient_id), None)

  def add_patient(self, name: str, date_of_birth: Optional[date] = None, sex: Sex = Sex.UNKNOWN, condition: Optional[str] = None, **kwargs) -> Patient:
    """Create a new patient. An explicit ``id`` may be passed for imported patients."""
    patient = Patient(name=name, date_of_birth=date_of_birth, sex=sex, condition=condition, **kwargs)
    if self.get_patient(patient.id) is not None:
      raise ValueError(f"Patient {patient.id} already exists")
    self._patients = [*self._patients, patient]
    return patient

  def update_patient(self, patient_id: str, **kwargs) -> Optional[Patient]:
    """Update display fields of a patient. The id cannot change."""
    current = self.get_patient(patient_id)
    if current is None:
      logger.warning("Cannot update unknown patient %s", patient_id)
      return None
    kwargs.pop("id", None)
    updated = Patient.model_validate({**current.model_dump(), **kwargs})
    self._patients = [updated if p.id == patient_id else p for p in self._patients]
    return updated

  def delete_patient(self, patient_id: str) -> bool:
    """Delete a patient with all of their growth records, derived BMI included."""
    found = self.get_patient(patient_id) is not None
    patients = [p for p in self._patients if p.id != patient_id]
    records = [r for r in self._records if r.patient_id != patient_id]
    selected = None if self._selected_patient_id == patient_id else self._selected_patient_id

    self._patients, self._records, self._selected_patient_id = patients, records, selected
    return found

  # -------------------------------------------------------------------------
  # Selection and settings
  # -------------------------------------------------------------------------

  @property
  def selected_patient_id(self) -> Optional[str]:
    return self._selected_patient_id

  @property
  def selected_patient(self) -> Optional[Patient]:
    if self._selected_patient_id is None:
      return None
    return self.get_patient(self._selected_patient_id)

  def select_patient(self, patient_id: Optional[str]) -> None:
    """Select a patient, or clear the selection with None."""
    if patient_id is not None and self.get_patient(patient_id) is None:
      logger.warning("Selecting patient %s, which is not in the store", patient_id)
    self._selected_patient_id = patient_id

  @property
  def settings(self) -> AppSettings:
    return self._settings

  def update_settings(self, **kwargs) -> AppSettings:
    """Merge the given fields into the current settings."""
    self._settings = AppSettings.model_validate({**self._settings.model_dump(), **kwargs})
    return self._settings

  # -------------------------------------------------------------------------
  # Growth records
  # -------------------------------------------------------------------------

  @property
  def records(self) -> list[GrowthRecord]:
    return list(self._records)

  def get_record(self, record_id: str) -> Optional[GrowthRecord]:
    """Get record by ID."""
    return next((r for r in self._records if r.id == record_id), None)

  def records_for_patient(self, patient_id: str) -> list[GrowthRecord]:
    """Get all growth records for a patient, in insertion order."""
    return [r for r in self._records if r.patient_id == patient_id]

  def add_record(self, data: GrowthRecordCreate | Mapping[str, Any]) -> GrowthRecord:
    """
    Commit a new growth record and derive its BMI consequence.

    Args:
      data: Record fields. Any ``id`` present is replaced.

    Returns:
      The committed record.

    Raises:
      MissingPatientError: If the record has no patient id.
      PatientNotFoundError: If the patient is not in the store.
      DerivedRecordError: If the record is a BMI.
    """
    if isinstance(data, Mapping):
      fields = dict(data)
    else:
      fields = data.model_dump()

    patient_id = fields.get("patient_id")
    if not patient_id:
      logger.error("Attempted to add growth record without patient_id: %r", fields)
      raise MissingPatientError("patient_id is required to add a growth record.")
    if self.get_patient(patient_id) is None:
      logger.error("Attempted to add growth record for unknown patient %s", patient_id)
      raise PatientNotFoundError(f"Patient {patient_id} does not exist.")

    fields.pop("id", None)
    record = GrowthRecord.model_validate(fields)
    if record.measurement_type == MeasurementType.BMI:
      logger.error("Attempted to add a BMI record directly for patient %s", patient_id)
      raise DerivedRecordError("BMI records are derived from weight and height and cannot be added.")

    records = [*self._records, record]
    if record.measurement_type in BMI_SOURCE_TYPES:
      records = self._derive_bmi(records, record)

    self._records = records
    return record

  def update_record(self, record_id: str, **kwargs) -> Optional[GrowthRecord]:
    """
    Update fields of an existing record.

    Changing the value of a weight or height does not recompute the BMI at
    that age; only adding a record does. A BMI record only accepts changes
    to its annotations, and no record can become or stop being a BMI.

    Raises:
      PatientNotFoundError: If the change names a patient not in the store.
      DerivedRecordError: If the change would write BMI data directly.
    """
    current = self.get_record(record_id)
    if current is None:
      logger.warning("Cannot update unknown growth record %s", record_id)
      return None

    kwargs.pop("id", None)
    new_type = MeasurementType(kwargs.get("measurement_type", current.measurement_type))
    if (new_type == MeasurementType.BMI) != (current.measurement_type == MeasurementType.BMI):
      raise DerivedRecordError("A record cannot be changed to or from a BMI.")
    if current.measurement_type == MeasurementType.BMI and set(kwargs) - BMI_EDITABLE_FIELDS:
      raise DerivedRecordError(
        f"Only {sorted(BMI_EDITABLE_FIELDS)} can be changed on a derived BMI record."
      )
    patient_id = kwargs.get("patient_id", current.patient_id)
    if self.get_patient(patient_id) is None:
      raise PatientNotFoundError(f"Patient {patient_id} does not exist.")

    updated = GrowthRecord.model_validate({**current.model_dump(), **kwargs})
    if updated.measurement_type in BMI_SOURCE_TYPES:
      logger.debug("Record %s updated; BMI at age %s is left as is", record_id, updated.age_months)

    self._records = [updated if r.id == record_id else r for r in self._records]
    return updated

  def delete_record(self, record_id: str) -> bool:
    """
    Delete a growth record.

    Deleting a weight, height or length also deletes the BMI at the same
    (patient, age), whether or not another counterpart remains.
    """
    target = self.get_record(record_id)
    if target is None:
      return False

    records = [r for r in self._records if r.id != record_id]
    if target.measurement_type in BMI_SOURCE_TYPES:
      records = [
        r for r in records
        if not (
          r.measurement_type == MeasurementType.BMI
          and r.patient_id == target.patient_id
          and self._same_age(r.age_months, target.age_months)
        )
      ]

    self._records = records
    return True

  # -------------------------------------------------------------------------
  # BMI derivation
  # -------------------------------------------------------------------------

  def _same_age(self, a: float, b: float) -> bool:
    if self._age_tolerance > 0:
      return abs(a - b) <= self._age_tolerance
    return a == b

  def _find_counterpart(self, records: list[GrowthRecord], record: GrowthRecord, types) -> Optional[GrowthRecord]:
    return next(
      (
        r for r in records
        if r.id != record.id
        and r.patient_id == record.patient_id
        and r.measurement_type in types
        and self._same_age(r.age_months, record.age_months)
      ),
      None,
    )

  def _derive_bmi(self, records: list[GrowthRecord], record: GrowthRecord) -> list[GrowthRecord]:
    """Return ``records`` with the BMI for ``record``'s (patient, age) created or refreshed."""
    if record.measurement_type in BMI_WEIGHT_TYPES:
      weight, height = record, self._find_counterpart(records, record, BMI_HEIGHT_TYPES)
    else:
      weight, height = self._find_counterpart(records, record, BMI_WEIGHT_TYPES), record

    if weight is None or height is None:
      logger.debug("No BMI counterpart for %s at age %s", record.measurement_type.value, record.age_months)
      return records

    weight_kg = convert_to_metric_for_calc(weight.value, weight.unit)
    height_cm = convert_to_metric_for_calc(height.value, height.unit)
    if math.isnan(weight_kg) or math.isnan(height_cm) or height_cm <= 0:
      logger.warning(
        "Skipping BMI for patient %s at age %s: weight %s kg, height %s cm",
        record.patient_id, record.age_months, weight_kg, height_cm,
      )
      return records

    bmi = calculate_bmi(weight_kg, height_cm)
    if math.isnan(bmi):
      return records

    # The record that triggered the derivation dates the BMI
    return self._upsert_bmi(records, record, bmi)

  def _upsert_bmi(self, records: list[GrowthRecord], source: GrowthRecord, bmi: float) -> list[GrowthRecord]:
    for index, existing in enumerate(records):
      if (
        existing.measurement_type == MeasurementType.BMI
        and existing.patient_id == source.patient_id
        and self._same_age(existing.age_months, source.age_months)
      ):
        refreshed = existing.model_copy(update={
          "value": bmi,
          "observation_date": source.observation_date,
          "unit": Unit.KG_PER_M2.value,
        })
        logger.debug("Updated BMI %s for patient %s at age %s", bmi, source.patient_id, source.age_months)
        return [*records[:index], refreshed, *records[index + 1:]]

    derived = GrowthRecord(
      patient_id=source.patient_id,
      observation_date=source.observation_date,
      age_months=source.age_months,
      measurement_type=MeasurementType.BMI,
      value=bmi,
      unit=Unit.KG_PER_M2.value,
    )
    logger.debug("Derived BMI %s for patient %s at age %s", bmi, source.patient_id, source.age_months)
    return [*records, derived]
