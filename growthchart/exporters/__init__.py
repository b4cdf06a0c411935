"""
Export and import functionality for the growth chart.
"""

from .fhir import import_fhir_patient, patient_from_fhir
from .json_export import export_patient_summary, export_snapshot, load_snapshot

__all__ = [
    "import_fhir_patient",
    "patient_from_fhir",
    "export_patient_summary",
    "export_snapshot",
    "load_snapshot",
]
