"""
Configuration for the growth chart.

Read from environment variables and exposed through a cached singleton.
"""

import os
from pathlib import Path
from typing import Optional

from growthchart.models import DisplayUnits

DEFAULT_LOG_LEVEL = "WARNING"


class GrowthChartConfig:
  """Environment-driven settings."""

  def __init__(self):
    self.units = os.environ.get("GROWTHCHART_UNITS", DisplayUnits.METRIC.value)
    self.log_level = os.environ.get("GROWTHCHART_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    self.age_tolerance = os.environ.get("GROWTHCHART_AGE_TOLERANCE", "0")
    self.reference_dir = os.environ.get("GROWTHCHART_REFERENCE_DIR")

  @property
  def display_units(self) -> DisplayUnits:
    """Default display system for converted values."""
    return DisplayUnits(self.units)

  @property
  def age_match_tolerance(self) -> float:
    """Absolute tolerance, in months, for pairing weight and height records."""
    return float(self.age_tolerance)

  @property
  def reference_path(self) -> Optional[Path]:
    return Path(self.reference_dir) if self.reference_dir else None

  def validate(self) -> None:
    """Raise error if a setting cannot be interpreted."""
    try:
      DisplayUnits(self.units)
    except ValueError:
      raise ValueError(
        f"GROWTHCHART_UNITS must be one of {[u.value for u in DisplayUnits]}, got {self.units!r}"
      ) from None
    try:
      tolerance = float(self.age_tolerance)
    except ValueError:
      raise ValueError(f"GROWTHCHART_AGE_TOLERANCE must be a number, got {self.age_tolerance!r}") from None
    if tolerance < 0:
      raise ValueError("GROWTHCHART_AGE_TOLERANCE must not be negative")


# -----------------------------------------------------------------------------
# Singleton instance
# -----------------------------------------------------------------------------

_config: Optional[GrowthChartConfig] = None


def get_config() -> GrowthChartConfig:
  """Get the validated configuration (singleton)."""
  global _config
  if _config is None:
    config = GrowthChartConfig()
    config.validate()
    _config = config
  return _config


def reset_config() -> None:
  """Reset the configuration singleton (useful for testing)."""
  global _config
  _config = None
