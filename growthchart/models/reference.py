"""
Reference growth-standard shapes.

A manifest lists the available charts; each chart payload carries an
age-ordered list of points with either named percentile columns or the
L/M/S triple. Files use camelCase keys, the models use snake_case.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReferenceModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LMSPoint(BaseModel):
    """One age row of a reference table. Extra keys are percentile columns."""
    model_config = ConfigDict(extra="allow")

    age: float
    l: float | None = None
    m: float | None = None
    s: float | None = None

    @property
    def has_lms(self) -> bool:
        return self.l is not None and self.m is not None and self.s is not None

    @property
    def centiles(self) -> dict[str, float]:
        """Percentile / Z columns carried alongside the LMS values."""
        return dict(self.model_extra or {})


class CentileManifestEntry(ReferenceModel):
    id: str
    name: str
    description: str = ""
    measurement_type: str
    sex: Literal["male", "female", "any"]
    age_range_months: tuple[float, float]
    source: str
    type: Literal["percentiles", "z-scores"]
    data_file: str


class CentileData(ReferenceModel):
    source: str
    name: str
    measurement_type: str
    sex: Literal["male", "female", "any"]
    age_unit: str = "months"
    measurement_unit: str
    centiles_available: list[str] = Field(default_factory=list)
    lms_parameters_available: list[str] | None = None
    data: list[LMSPoint] = Field(default_factory=list)

    @property
    def has_lms(self) -> bool:
        """True only when the chart declares all of l, m and s."""
        declared = set(self.lms_parameters_available or [])
        return {"l", "m", "s"} <= declared

    def sorted_points(self) -> list[LMSPoint]:
        return sorted(self.data, key=lambda p: p.age)
