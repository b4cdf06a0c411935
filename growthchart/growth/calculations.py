"""
BMI, age and growth velocity calculations.

Every function here is pure. Invalid inputs give NaN or None plus a
logged warning rather than an exception, so one bad record does not stop a
whole series from being processed.
"""

from __future__ import annotations

import calendar
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time

from growthchart.models import GrowthRecordCreate, MeasurementType

logger = logging.getLogger(__name__)

# Average days per month, used for the fractional part of an age
AVERAGE_DAYS_PER_MONTH = 30.4375

# All observation dates are compared at noon
NORMALIZED_TIME = time(12, 0)

VELOCITY_TYPES = frozenset({
    MeasurementType.WEIGHT,
    MeasurementType.HEIGHT,
    MeasurementType.LENGTH,
    MeasurementType.HEAD_CIRCUMFERENCE,
})


# =============================================================================
# BMI
# =============================================================================


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    """
    Calculate BMI from weight and height, rounded to 1 decimal.

    Returns NaN for a non-positive height, a negative weight or NaN input.
    """
    if math.isnan(weight_kg) or math.isnan(height_cm) or height_cm <= 0 or weight_kg < 0:
        logger.warning(
            "Invalid input for BMI calculation: weight %skg, height %scm", weight_kg, height_cm
        )
        return math.nan
    height_m = height_cm / 100
    return round(weight_kg / (height_m * height_m), 1)


# =============================================================================
# AGE
# =============================================================================


def _normalize_date(value: date | datetime | str | None) -> datetime | None:
    """Parse a date-like value and pin it to noon. None if unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        day = value.date()
    elif isinstance(value, date):
        day = value
    else:
        try:
            day = datetime.fromisoformat(str(value).strip()).date()
        except ValueError:
            return None
    return datetime.combine(day, NORMALIZED_TIME)


def _days_in_previous_month(day: datetime) -> int:
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    return calendar.monthrange(year, month)[1]


def calculate_age_in_months(
    date_of_birth: date | datetime | str | None,
    observation_date: date | datetime | str | None,
) -> float:
    """
    Calculate calendar-accurate age in months, rounded to 2 decimals.

    Whole months are counted on the calendar, borrowing the length of the
    month before the observation when its day-of-month precedes the birth
    day. Leftover days are a fraction of the average month. The result never
    decreases as the observation date moves later.

    Args:
        date_of_birth: Date of birth (date, datetime or ISO string)
        observation_date: Date of the measurement

    Returns:
        Age in months, or NaN if either date is invalid or the observation
        precedes birth.
    """
    dob = _normalize_date(date_of_birth)
    observed = _normalize_date(observation_date)

    if dob is None or observed is None:
        logger.warning(
            "Cannot calculate age from dates %r and %r", date_of_birth, observation_date
        )
        return math.nan
    if observed < dob:
        logger.warning("Observation date %s precedes date of birth %s", observed.date(), dob.date())
        return math.nan
    if observed == dob:
        return 0.00

    year_diff = observed.year - dob.year
    month_diff = observed.month - dob.month
    day_diff = observed.day - dob.day

    if day_diff < 0:
        month_diff -= 1
        # Birth day clamped to the borrowed month, e.g. Jan 31 -> Feb 28
        borrowed = _days_in_previous_month(observed)
        day_diff = observed.day + borrowed - min(dob.day, borrowed)

    if month_diff < 0:
        month_diff += 12
        year_diff -= 1

    whole_months = year_diff * 12 + month_diff
    return round(whole_months + day_diff / AVERAGE_DAYS_PER_MONTH, 2)


# =============================================================================
# VELOCITY
# =============================================================================


@dataclass(frozen=True)
class VelocityPoint:
    """Annualized rate of change between two measurements."""
    age_months_midpoint: float
    velocity: float
    velocity_unit: str
    record1_date: date
    record2_date: date


def calculate_annualized_velocity(
    record1: GrowthRecordCreate,
    record2: GrowthRecordCreate,
) -> VelocityPoint | None:
    """
    Calculate the yearly rate of change from record1 to record2.

    Returns None when the records differ in type or unit, when record2 is
    not at a greater age than record1, or when the type has no velocity
    (BMI and Other).
    """
    if record1.measurement_type != record2.measurement_type:
        logger.warning(
            "Velocity calculation: measurement types do not match (%s, %s)",
            record1.measurement_type.value, record2.measurement_type.value,
        )
        return None
    if record1.unit != record2.unit:
        logger.warning(
            "Velocity calculation: units do not match (%s, %s)", record1.unit, record2.unit
        )
        return None
    if record2.age_months <= record1.age_months:
        return None
    if record1.measurement_type not in VELOCITY_TYPES:
        logger.warning(
            "Velocity calculation is not supported for %s", record1.measurement_type.value
        )
        return None

    delta_years = (record2.age_months - record1.age_months) / 12.0
    velocity = (record2.value - record1.value) / delta_years

    return VelocityPoint(
        age_months_midpoint=(record1.age_months + record2.age_months) / 2.0,
        velocity=round(velocity, 2),
        velocity_unit=f"{record1.unit}/year",
        record1_date=record1.observation_date,
        record2_date=record2.observation_date,
    )


def generate_velocity_data_series(
    records: Iterable[GrowthRecordCreate],
) -> list[VelocityPoint]:
    """
    Velocity between each consecutive pair of records, ordered by age.

    Pairs that cannot produce a velocity (equal ages, mixed units) are
    skipped.
    """
    ordered = sorted(records, key=lambda r: r.age_months)
    series = []
    for earlier, later in zip(ordered, ordered[1:]):
        point = calculate_annualized_velocity(earlier, later)
        if point is not None:
            series.append(point)
    return series
