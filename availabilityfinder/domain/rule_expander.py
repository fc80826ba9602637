"""
Expansion of availability rules into concrete date ranges.

Both expanders are pure: they take a rule, an explicit target timezone and
(for working hours) a window, and return new DateRange values.
"""

from datetime import datetime, time
from typing import List, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import InvalidDateRangeError
from .models import DateOverrideRule, DateRange, WorkingHoursRule, resolve_timezone, weekday_index


def validate_window(date_from: datetime, date_to: datetime) -> Tuple[DateTime, DateTime]:
    """
    Check the requested window and return both bounds as pendulum instances.

    Raises:
        InvalidDateRangeError: If a bound is naive or the window is inverted
    """
    if date_from.tzinfo is None or date_to.tzinfo is None:
        raise InvalidDateRangeError("Window bounds must be timezone aware")

    date_from = pendulum.instance(date_from)
    date_to = pendulum.instance(date_to)

    if date_from > date_to:
        raise InvalidDateRangeError(
            f"Window start {date_from} must not be after window end {date_to}"
        )

    return date_from, date_to


def _at_wall_clock(day: DateTime, time_of_day: time) -> DateTime:
    """
    Return ``day`` at the given wall-clock time.

    A time inside a spring-forward gap does not exist; it maps to the first
    instant after the gap instead of being pushed forward by the gap length.
    """
    value = day.set(
        hour=time_of_day.hour,
        minute=time_of_day.minute,
        second=0,
        microsecond=0,
    )

    if (value.hour, value.minute) != (time_of_day.hour, time_of_day.minute):
        value = value.set(minute=0)

    return value


def expand_working_hours(
    rule: WorkingHoursRule,
    time_zone: str,
    date_from: datetime,
    date_to: datetime,
) -> List[DateRange]:
    """
    Generate one range per matching day of ``rule`` within the window.

    Days are walked as calendar days in ``time_zone`` so that start and end
    keep their wall-clock time across DST transitions. Each candidate is
    clipped to the window and dropped unless it still has a positive length.
    """
    tz = resolve_timezone(time_zone)
    date_from, date_to = validate_window(date_from, date_to)

    results: List[DateRange] = []
    current = date_from.in_timezone(tz).start_of("day")

    while current < date_to:
        # Weekday of the wall-clock date in the target zone, not UTC
        if weekday_index(current) in rule.days:
            start = _at_wall_clock(current, rule.start_time)
            end = _at_wall_clock(current, rule.end_time)

            clipped_start = max(start, date_from)
            clipped_end = min(end, date_to)

            if clipped_start < clipped_end:
                results.append(
                    DateRange(
                        start=clipped_start.in_timezone(tz),
                        end=clipped_end.in_timezone(tz),
                    )
                )

        current = current.add(days=1).start_of("day")

    return results


def _reinterpret_in_zone(value: DateTime, tz) -> DateTime:
    """Keep the wall-clock value of ``value`` but attach ``tz`` to it."""
    return pendulum.datetime(
        value.year,
        value.month,
        value.day,
        value.hour,
        value.minute,
        tz=tz,
    )


def expand_date_override(rule: DateOverrideRule, time_zone: str) -> DateRange:
    """
    Turn a date override into exactly one range in ``time_zone``.

    The result may be zero-length; callers must keep it until overrides have
    been merged with working hours, as it marks a cancelled day.
    """
    tz = resolve_timezone(time_zone)
    day = pendulum.datetime(rule.date.year, rule.date.month, rule.date.day, tz="UTC")

    start = day.add(hours=rule.start_time.hour, minutes=rule.start_time.minute)
    end = day.add(hours=rule.end_time.hour, minutes=rule.end_time.minute)

    return DateRange(
        start=_reinterpret_in_zone(start, tz),
        end=_reinterpret_in_zone(end, tz),
    )
