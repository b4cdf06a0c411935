"""
Reference chart loading and chart/table views.
"""

from .loader import (
    load_centile_data,
    load_chart_for_entry,
    load_manifest,
    resolve_data_file,
    resolve_reference_file,
)
from .series import (
    CHART_MEASUREMENT_KEYS,
    ChartPoint,
    build_chart_series,
    centile_curve,
    chart_measurement_key,
    filter_manifest_for_sex,
    sort_for_table,
)

__all__ = [
    "load_centile_data",
    "load_chart_for_entry",
    "load_manifest",
    "resolve_data_file",
    "resolve_reference_file",
    "CHART_MEASUREMENT_KEYS",
    "ChartPoint",
    "build_chart_series",
    "centile_curve",
    "chart_measurement_key",
    "filter_manifest_for_sex",
    "sort_for_table",
]
