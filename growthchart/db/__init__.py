"""
Record store for the growth chart.

Holds patients and growth records and keeps derived BMI records in step
with them.
"""

from growthchart.db.store import GrowthStore, StoreSnapshot

__all__ = [
  "GrowthStore",
  "StoreSnapshot",
]
