"""
Chart and table views of a patient's growth records.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from growthchart.growth.lms import get_z_score_for_measurement, value_from_lms_z
from growthchart.models import (
    CentileData,
    CentileManifestEntry,
    GrowthRecord,
    MeasurementType,
    Sex,
)

# Reference chart measurement key for each record type
CHART_MEASUREMENT_KEYS: dict[MeasurementType, str] = {
    MeasurementType.WEIGHT: "weight_for_age",
    MeasurementType.HEIGHT: "length_for_age",
    MeasurementType.LENGTH: "length_for_age",
    MeasurementType.HEAD_CIRCUMFERENCE: "hc_for_age",
    MeasurementType.BMI: "bmi_for_age",
}


@dataclass(frozen=True)
class ChartPoint:
    """A patient measurement placed on a reference chart."""
    age_months: float
    value: float
    z_score: float | None = None


def filter_manifest_for_sex(
    manifest: Iterable[CentileManifestEntry],
    sex: Sex | str,
) -> list[CentileManifestEntry]:
    """Charts that apply to the patient's sex, plus those marked ``any``."""
    sex_value = Sex(sex).value
    return [entry for entry in manifest if entry.sex in (sex_value, "any")]


def chart_measurement_key(record: GrowthRecord) -> str:
    """The reference chart key a record is plotted against."""
    key = CHART_MEASUREMENT_KEYS.get(record.measurement_type)
    if key is not None:
        return key
    return record.display_name.lower().replace(" ", "_")


def build_chart_series(
    records: Iterable[GrowthRecord],
    centile_data: CentileData,
) -> list[ChartPoint]:
    """
    Patient points for a reference chart, ordered by age.

    Only records of the chart's measurement are kept. Z-scores are attached
    when the chart declares L, M and S; a point whose Z-score cannot be
    computed keeps ``z_score`` as None.
    """
    points = []
    table = centile_data.sorted_points() if centile_data.has_lms else None

    for record in records:
        if chart_measurement_key(record) != centile_data.measurement_type:
            continue
        z = None
        if table is not None:
            z = get_z_score_for_measurement(record.value, record.age_months, table)
            if math.isnan(z):
                z = None
        points.append(ChartPoint(age_months=record.age_months, value=record.value, z_score=z))

    return sorted(points, key=lambda p: p.age_months)


def centile_curve(centile_data: CentileData, z: float) -> list[tuple[float, float]]:
    """
    Reference line at a Z-score, as (age, value) pairs.

    Ages without complete LMS values, or where the curve is undefined, are
    left out.
    """
    curve = []
    for point in centile_data.sorted_points():
        if not point.has_lms:
            continue
        value = value_from_lms_z(z, point.l, point.m, point.s)
        if not math.isnan(value):
            curve.append((point.age, value))
    return curve


def sort_for_table(records: Iterable[GrowthRecord]) -> list[GrowthRecord]:
    """Newest observation first; ties broken by the greater age."""
    return sorted(records, key=lambda r: (r.observation_date, r.age_months), reverse=True)
