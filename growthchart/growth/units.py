"""
Metric / imperial conversions for growth measurements.

Plain conversions keep full precision. Rounding happens only in the
``*_for_display`` helpers; calculations go through
``convert_to_metric_for_calc``, which never rounds.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from growthchart.models import DisplayUnits, Unit

logger = logging.getLogger(__name__)

KG_TO_LBS = 2.20462262185
LBS_TO_KG = 1 / KG_TO_LBS
INCHES_TO_CM = 2.54
CM_TO_INCHES = 1 / INCHES_TO_CM


@dataclass(frozen=True)
class DisplayValue:
    """A value converted for display, with its unit label."""
    value: float
    unit: str


# --- Weight ---

def kg_to_lbs(kg: float) -> float:
    """Convert kilograms to pounds."""
    if math.isnan(kg):
        return math.nan
    return kg * KG_TO_LBS


def lbs_to_kg(lbs: float) -> float:
    """Convert pounds to kilograms."""
    if math.isnan(lbs):
        return math.nan
    return lbs * LBS_TO_KG


# --- Height / length ---

def cm_to_inches(cm: float) -> float:
    """Convert centimeters to inches."""
    if math.isnan(cm):
        return math.nan
    return cm * CM_TO_INCHES


def inches_to_cm(inches: float) -> float:
    """Convert inches to centimeters."""
    if math.isnan(inches):
        return math.nan
    return inches * INCHES_TO_CM


# --- Display ---

def convert_weight_for_display(
    value: float,
    original_unit: str,
    target_system: DisplayUnits | str,
) -> DisplayValue:
    """
    Convert a weight to the target display system.

    Metric: lbs are converted to kg unrounded, kg pass through rounded to
    2 decimals. Imperial: kg are converted to lbs, and either way the
    result is rounded to 1 decimal.
    """
    if DisplayUnits(target_system) == DisplayUnits.METRIC:
        if original_unit == Unit.LBS.value:
            return DisplayValue(lbs_to_kg(value), Unit.KG.value)
        return DisplayValue(round(value, 2), Unit.KG.value)

    lbs = kg_to_lbs(value) if original_unit == Unit.KG.value else value
    return DisplayValue(round(lbs, 1), Unit.LBS.value)


def convert_height_for_display(
    value: float,
    original_unit: str,
    target_system: DisplayUnits | str,
) -> DisplayValue:
    """
    Convert a height, length or head circumference to the target system.

    A value already in the target unit is rounded to 1 decimal; a converted
    value keeps full precision.
    """
    if DisplayUnits(target_system) == DisplayUnits.METRIC:
        if original_unit == Unit.IN.value:
            return DisplayValue(inches_to_cm(value), Unit.CM.value)
        return DisplayValue(round(value, 1), Unit.CM.value)

    if original_unit == Unit.CM.value:
        return DisplayValue(cm_to_inches(value), Unit.IN.value)
    return DisplayValue(round(value, 1), Unit.IN.value)


# --- Calculation ---

def convert_to_metric_for_calc(value: float, unit: str) -> float:
    """
    Convert a stored value to kg or cm before any cross-unit arithmetic.

    Unknown units are logged and the value is returned unchanged; callers
    should treat such a result as suspect.
    """
    if unit == Unit.LBS.value:
        return lbs_to_kg(value)
    if unit == Unit.IN.value:
        return inches_to_cm(value)
    if unit in (Unit.KG.value, Unit.CM.value, Unit.KG_PER_M2.value):
        return value

    logger.warning("Unsupported unit for metric conversion: %r", unit)
    return value
