"""
Domain models for availability rules and date ranges.
"""

import datetime
from dataclasses import dataclass
from typing import Annotated, Generic, List, Literal, Optional, Set, TypeVar, Union

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, Field, field_validator, model_validator

from .exceptions import InvalidTimezoneError

T = TypeVar("T")


def resolve_timezone(name: str):
    """Return the pendulum timezone for ``name`` or raise InvalidTimezoneError."""
    try:
        return pendulum.timezone(name)
    except (ValueError, KeyError) as exc:
        raise InvalidTimezoneError(f"Unknown timezone: '{name}'") from exc


def weekday_index(dt: DateTime) -> int:
    """Day of week of the wall-clock date, 0=Sunday ... 6=Saturday."""
    return dt.isoweekday() % 7


@dataclass(frozen=True)
class DateRange(Generic[T]):
    """
    An immutable range between two timezone-aware instants.

    Invariant: start must not be after end. Zero-length ranges are allowed;
    date overrides use them to cancel a day.

    ``payload`` carries arbitrary caller data that survives subtraction.
    """
    start: DateTime
    end: DateTime
    payload: Optional[T] = None

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Start time {self.start} must not be after end time {self.end}")

    def is_empty(self) -> bool:
        """Return True for a zero-length range."""
        return self.start == self.end

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "DateRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and self.end > other.start

    def intersect(self, other: "DateRange") -> "DateRange | None":
        """
        Calculate the intersection of two ranges.
        Returns None if there is no overlap.
        """
        start = max(self.start, other.start)
        end = min(self.end, other.end)

        if not start < end:
            return None

        return DateRange(start=start, end=end)

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


def _coerce_time_of_day(value):
    # YAML 1.1 reads an unquoted 17:30 as sexagesimal minutes (1050).
    if isinstance(value, int) and not isinstance(value, bool):
        hours, minutes = divmod(value, 60)
        return datetime.time(hour=hours, minute=minutes)
    return value


class WorkingHoursRule(BaseModel):
    """
    Recurring weekly availability: the same wall-clock hours on every
    matching day of the week (0=Sunday ... 6=Saturday).
    """
    kind: Literal["working_hours"] = "working_hours"
    days: Set[int]
    start_time: datetime.time
    end_time: datetime.time

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: Set[int]) -> Set[int]:
        """Ensure weekdays are in valid range."""
        invalid_days = sorted(day for day in value if day not in range(7))
        if invalid_days:
            raise ValueError(f"days must be between 0 and 6, got {invalid_days}")
        return value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def coerce_time(cls, value):
        return _coerce_time_of_day(value)


class DateOverrideRule(BaseModel):
    """
    Availability for exactly one calendar date, replacing any working hours
    on that date. Equal start and end times mean "unavailable all day".
    """
    kind: Literal["date_override"] = "date_override"
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def coerce_time(cls, value):
        return _coerce_time_of_day(value)

    @model_validator(mode="after")
    def validate_times_order(self) -> "DateOverrideRule":
        """An override may be empty but never inverted."""
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be earlier than start_time")
        return self


AvailabilityRule = Annotated[
    Union[WorkingHoursRule, DateOverrideRule],
    Field(discriminator="kind"),
]


@dataclass
class BookableSlot:
    """
    Represents a found common free range.
    """
    date_range: DateRange
    participants: List[str]  # Email addresses of participants

    def format_display(self, timezone: Optional[str] = None) -> str:
        """
        Format the slot for display, optionally converted to ``timezone``.
        Format: Weekday, YYYY-MM-DD | HH:mm - HH:mm
        """
        start = self.date_range.start
        end = self.date_range.end

        if timezone:
            start = start.in_timezone(timezone)
            end = end.in_timezone(timezone)

        date_str = start.format("dddd, YYYY-MM-DD")
        time_str = f"{start.format('HH:mm')} - {end.format('HH:mm')}"
        duration = self.date_range.duration_minutes()

        return f"{date_str} | {time_str} ({duration} min)"
