"""
Growth calculations: unit conversion, BMI, age, velocity and LMS Z-scores.
"""

from .calculations import (
    VelocityPoint,
    calculate_age_in_months,
    calculate_annualized_velocity,
    calculate_bmi,
    generate_velocity_data_series,
)
from .lms import (
    LMSParameters,
    calculate_z_score,
    get_lms_for_age,
    get_z_score_for_measurement,
    percentile_from_z,
    value_from_lms_z,
    z_from_percentile,
)
from .units import (
    DisplayValue,
    cm_to_inches,
    convert_height_for_display,
    convert_to_metric_for_calc,
    convert_weight_for_display,
    inches_to_cm,
    kg_to_lbs,
    lbs_to_kg,
)

__all__ = [
    "VelocityPoint",
    "calculate_age_in_months",
    "calculate_annualized_velocity",
    "calculate_bmi",
    "generate_velocity_data_series",
    "LMSParameters",
    "calculate_z_score",
    "get_lms_for_age",
    "get_z_score_for_measurement",
    "percentile_from_z",
    "value_from_lms_z",
    "z_from_percentile",
    "DisplayValue",
    "cm_to_inches",
    "convert_height_for_display",
    "convert_to_metric_for_calc",
    "convert_weight_for_display",
    "inches_to_cm",
    "kg_to_lbs",
    "lbs_to_kg",
]
