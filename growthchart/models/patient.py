"""
Core data models for the growth chart.

These Pydantic models define the internal representation of patients and
their growth records. All derivation, display and export operations work
with these models.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator


def generate_id() -> str:
    """Generate a unique identifier."""
    return str(uuid4())


# =============================================================================
# ENUMS
# =============================================================================


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNKNOWN = "unknown"


class MeasurementType(str, Enum):
    WEIGHT = "Weight"
    HEIGHT = "Height"
    LENGTH = "Length"
    HEAD_CIRCUMFERENCE = "HeadCircumference"
    BMI = "BMI"
    OTHER = "Other"


class Unit(str, Enum):
    KG = "kg"
    LBS = "lbs"
    CM = "cm"
    IN = "in"
    KG_PER_M2 = "kg/m²"


class DisplayUnits(str, Enum):
    METRIC = "Metric"
    IMPERIAL = "Imperial"


class ChartType(str, Enum):
    WEIGHT_FOR_AGE = "WeightForAge"
    HEIGHT_FOR_AGE = "HeightForAge"
    HC_FOR_AGE = "HCForAge"
    BMI_FOR_AGE = "BMIForAge"


class Language(str, Enum):
    ENGLISH = "English"
    SPANISH = "Spanish"


# Fixed unit set per closed measurement type
ALLOWED_UNITS: dict[MeasurementType, frozenset[str]] = {
    MeasurementType.WEIGHT: frozenset({Unit.KG.value, Unit.LBS.value}),
    MeasurementType.HEIGHT: frozenset({Unit.CM.value, Unit.IN.value}),
    MeasurementType.LENGTH: frozenset({Unit.CM.value, Unit.IN.value}),
    MeasurementType.HEAD_CIRCUMFERENCE: frozenset({Unit.CM.value, Unit.IN.value}),
    MeasurementType.BMI: frozenset({Unit.KG_PER_M2.value}),
}

# Types that feed the derived BMI record
BMI_WEIGHT_TYPES = frozenset({MeasurementType.WEIGHT})
BMI_HEIGHT_TYPES = frozenset({MeasurementType.HEIGHT, MeasurementType.LENGTH})
BMI_SOURCE_TYPES = BMI_WEIGHT_TYPES | BMI_HEIGHT_TYPES

OTHER_NAME_MAX_LENGTH = 50
OTHER_UNIT_MAX_LENGTH = 20


# =============================================================================
# PATIENT
# =============================================================================


class Patient(BaseModel):
    """A patient whose growth is being tracked."""
    id: str = Field(default_factory=generate_id)
    name: str
    date_of_birth: date | None = None
    sex: Sex = Sex.UNKNOWN
    condition: str | None = None


# =============================================================================
# GROWTH RECORDS
# =============================================================================


class GrowthRecordCreate(BaseModel):
    """
    A growth measurement before it is committed to the store.

    Closed measurement types carry a unit from their fixed set. ``Other``
    carries a free-text name and unit instead.
    """
    patient_id: str
    observation_date: date
    age_months: float
    measurement_type: MeasurementType
    value: float
    unit: str

    other_measurement_name: str | None = Field(default=None, max_length=OTHER_NAME_MAX_LENGTH)
    notes: str | None = Field(default=None, max_length=500)
    intervention_type: str | None = Field(default=None, max_length=50)
    intervention_details: str | None = Field(default=None, max_length=200)

    # Imported from an external clinical system
    is_external: bool = False

    @model_validator(mode="after")
    def check_unit_for_type(self):
        if self.measurement_type == MeasurementType.OTHER:
            name = (self.other_measurement_name or "").strip()
            if not name:
                raise ValueError("other_measurement_name is required for measurement type Other")
            unit = self.unit.strip()
            if not unit or len(unit) > OTHER_UNIT_MAX_LENGTH:
                raise ValueError(
                    f"unit for measurement type Other must be 1-{OTHER_UNIT_MAX_LENGTH} characters"
                )
            return self

        allowed = ALLOWED_UNITS[self.measurement_type]
        if self.unit not in allowed:
            raise ValueError(
                f"unit {self.unit!r} is not valid for {self.measurement_type.value}; "
                f"expected one of {sorted(allowed)}"
            )
        if self.other_measurement_name is not None:
            raise ValueError("other_measurement_name is only allowed for measurement type Other")
        return self

    @property
    def display_name(self) -> str:
        if self.measurement_type == MeasurementType.OTHER:
            return self.other_measurement_name or MeasurementType.OTHER.value
        return self.measurement_type.value


class GrowthRecord(GrowthRecordCreate):
    """A committed growth measurement. BMI records are derived by the store."""
    id: str = Field(default_factory=generate_id)


# =============================================================================
# SETTINGS
# =============================================================================


class NotificationSettings(BaseModel):
    appointment_reminders: bool = True
    new_data_alerts: bool = False


class AppSettings(BaseModel):
    """User-facing display preferences."""
    default_chart_type: ChartType = ChartType.WEIGHT_FOR_AGE
    units: DisplayUnits = DisplayUnits.METRIC
    dark_mode: bool = False
    language: Language = Language.ENGLISH
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
