"""
Domain-specific exception hierarchy for the availability finder.
"""


class AvailabilityError(Exception):
    """Base class for all application-level errors."""


class InvalidDateRangeError(AvailabilityError, ValueError):
    """Raised when a requested window is inverted or not timezone aware."""


class InvalidTimezoneError(AvailabilityError, ValueError):
    """Raised when a timezone name cannot be resolved."""


class ScheduleProviderError(AvailabilityError):
    """Raised when schedule or busy-time data cannot be read or parsed."""


class UnknownParticipantError(AvailabilityError, ValueError):
    """Raised when a participant identifier cannot be resolved."""
