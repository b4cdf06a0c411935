"""
Growth Chart

Pediatric growth tracking: unit conversion, age, BMI derivation, growth
velocity and LMS-based Z-scores.
"""

__version__ = "0.1.0"
