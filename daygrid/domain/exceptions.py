"""
Domain-specific exception hierarchy for the day calendar.
"""


class DayGridError(Exception):
    """Base class for all application-level errors."""


class ScheduleFetchError(DayGridError):
    """Raised when the day schedule cannot be fetched or parsed."""


class InvalidAppointmentError(DayGridError, ValueError):
    """Raised when appointment data violates the occupancy contract."""
