"""
Domain layer - Pure business logic without external dependencies.
"""

from .date_ranges import build_date_ranges, group_by_calendar_date, intersect, subtract
from .models import (
    AvailabilityRule,
    BookableSlot,
    DateOverrideRule,
    DateRange,
    WorkingHoursRule,
)
from .rule_expander import expand_date_override, expand_working_hours

__all__ = [
    "AvailabilityRule",
    "BookableSlot",
    "DateOverrideRule",
    "DateRange",
    "WorkingHoursRule",
    "build_date_ranges",
    "expand_date_override",
    "expand_working_hours",
    "group_by_calendar_date",
    "intersect",
    "subtract",
]
