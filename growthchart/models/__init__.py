"""
Data models for the growth chart.
"""

from .patient import (
    ALLOWED_UNITS,
    BMI_HEIGHT_TYPES,
    BMI_SOURCE_TYPES,
    BMI_WEIGHT_TYPES,
    AppSettings,
    ChartType,
    DisplayUnits,
    GrowthRecord,
    GrowthRecordCreate,
    Language,
    MeasurementType,
    NotificationSettings,
    Patient,
    Sex,
    Unit,
    generate_id,
)
from .reference import CentileData, CentileManifestEntry, LMSPoint

__all__ = [
    "ALLOWED_UNITS",
    "BMI_HEIGHT_TYPES",
    "BMI_SOURCE_TYPES",
    "BMI_WEIGHT_TYPES",
    "AppSettings",
    "ChartType",
    "DisplayUnits",
    "GrowthRecord",
    "GrowthRecordCreate",
    "Language",
    "MeasurementType",
    "NotificationSettings",
    "Patient",
    "Sex",
    "Unit",
    "generate_id",
    "CentileData",
    "CentileManifestEntry",
    "LMSPoint",
]
