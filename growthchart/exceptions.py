"""
Errors raised by the growth chart.

Numeric edge cases never raise; they return NaN or None and log. Only
contract violations on the record store and unreadable reference files do.
"""


class MissingPatientError(ValueError):
    """Raised when a growth record is added without an owning patient id."""
    pass


class PatientNotFoundError(ValueError):
    """Raised when a growth record names a patient the store does not hold."""
    pass


class DerivedRecordError(ValueError):
    """Raised when a caller tries to write a BMI record the store derives itself."""
    pass


class ReferenceDataError(ValueError):
    """Raised when a reference manifest or chart file cannot be read."""
    pass
