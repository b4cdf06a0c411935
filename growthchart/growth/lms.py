"""
Z-scores from reference growth standards using the LMS method.

The LMS method expresses growth as:
- L (lambda): Box-Cox power transformation
- M (mu): Median
- S (sigma): Coefficient of variation

Z-score = ((value/M)^L - 1) / (L * S)  when L ≠ 0
Z-score = ln(value/M) / S              when L = 0

Percentile = Φ(Z-score) where Φ is the standard normal CDF

Reference tables are age-ordered sequences of ``LMSPoint`` and are never
modified here. Ages outside a table are not extrapolated.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from scipy import stats

from growthchart.models import LMSPoint

logger = logging.getLogger(__name__)

# |L| below this is treated as L = 0
L_EPSILON = 1e-5


@dataclass(frozen=True)
class LMSParameters:
    """L, M and S at one age."""
    l: float
    m: float
    s: float


def _interpolate(x: float, x0: float, y0: float, x1: float, y1: float) -> float:
    if x0 == x1:
        return y0
    return y0 + (x - x0) * (y1 - y0) / (x1 - x0)


def get_lms_for_age(age: float, lms_table: Sequence[LMSPoint] | None) -> LMSParameters | None:
    """
    Look up or interpolate LMS values for an age.

    An exact age match returns the stored triple. Otherwise L, M and S are
    interpolated linearly between the nearest lower and upper rows.

    Returns:
        LMSParameters, or None if the age is outside the table or a bounding
        row lacks any of L, M, S.
    """
    if not lms_table:
        return None

    lower: LMSPoint | None = None
    upper: LMSPoint | None = None

    for point in lms_table:
        if point.age == age:
            if not point.has_lms:
                logger.warning("LMS parameters missing at age %s", age)
                return None
            return LMSParameters(point.l, point.m, point.s)
        if point.age < age and (lower is None or point.age > lower.age):
            lower = point
        if point.age > age and (upper is None or point.age < upper.age):
            upper = point

    if lower is None or upper is None:
        logger.debug("Age %s is outside the reference table range", age)
        return None

    if not (lower.has_lms and upper.has_lms):
        logger.warning("LMS parameters missing for interpolation at age %s", age)
        return None

    return LMSParameters(
        l=_interpolate(age, lower.age, lower.l, upper.age, upper.l),
        m=_interpolate(age, lower.age, lower.m, upper.age, upper.m),
        s=_interpolate(age, lower.age, lower.s, upper.age, upper.s),
    )


def calculate_z_score(value: float, l: float, m: float, s: float) -> float:
    """
    Calculate a Z-score from a measurement and its LMS parameters.

    Returns NaN (and logs) when S is zero, when the power transform would be
    taken of a non-positive base, or, for L ≈ 0, when value or M is not
    positive.
    """
    if s == 0:
        logger.warning("S value is zero, Z-score calculation is not possible")
        return math.nan
    if m <= 0:
        logger.warning("M value %s is not positive, Z-score may be invalid", m)

    if abs(l) < L_EPSILON:
        if value <= 0 or m <= 0:
            logger.warning("Cannot calculate Z-score with L=0 for non-positive value or M")
            return math.nan
        return math.log(value / m) / s

    if m == 0:
        logger.warning("Cannot calculate Z-score with M=0")
        return math.nan
    ratio = value / m
    if ratio <= 0:
        logger.warning("Invalid value for Z-score calculation: (value/M)^L would be non-positive")
        return math.nan
    return (math.pow(ratio, l) - 1) / (l * s)


def get_z_score_for_measurement(
    value: float,
    age: float,
    lms_table: Sequence[LMSPoint] | None,
) -> float:
    """Look up LMS for the age and compute the Z-score. NaN if either step fails."""
    lms = get_lms_for_age(age, lms_table)
    if lms is None:
        return math.nan
    return calculate_z_score(value, lms.l, lms.m, lms.s)


def value_from_lms_z(z: float, l: float, m: float, s: float) -> float:
    """
    Calculate the measurement at a Z-score (inverse LMS).

    Returns NaN where the inverse is undefined.
    """
    if math.isnan(z):
        return math.nan
    if abs(l) < L_EPSILON:
        return m * math.exp(z * s)
    base = 1 + l * s * z
    if base <= 0:
        logger.warning("Z-score %s is outside the range the LMS curve can represent", z)
        return math.nan
    return m * math.pow(base, 1 / l)


def percentile_from_z(z: float) -> float:
    """Convert Z-score to percentile using normal CDF."""
    if math.isnan(z):
        return math.nan
    return float(stats.norm.cdf(z) * 100)


def z_from_percentile(percentile: float) -> float:
    """Convert percentile to Z-score using inverse normal CDF."""
    if math.isnan(percentile) or not 0 < percentile < 100:
        logger.warning("Percentile %s must be strictly between 0 and 100", percentile)
        return math.nan
    return float(stats.norm.ppf(percentile / 100))
