"""
Core interval logic: building a participant's date ranges from availability
rules, and combining range lists across participants.

Pure domain logic: no I/O, no shared state.
"""

import logging
from dataclasses import replace
from datetime import datetime
from functools import reduce
from typing import Dict, Iterable, List, Sequence, TypeVar

from pydantic import TypeAdapter

from .models import AvailabilityRule, DateRange
from .rule_expander import expand_date_override, expand_working_hours, validate_window

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=DateRange)

_rules_adapter = TypeAdapter(List[AvailabilityRule])


def group_by_calendar_date(ranges: Iterable[R]) -> Dict[str, List[R]]:
    """
    Bucket ranges by the calendar date (YYYY-MM-DD) of their start, as seen
    in the range's own timezone. Order is preserved inside each bucket.
    """
    groups: Dict[str, List[R]] = {}

    for date_range in ranges:
        groups.setdefault(date_range.start.format("YYYY-MM-DD"), []).append(date_range)

    return groups


def build_date_ranges(
    availability: Iterable[AvailabilityRule],
    time_zone: str,
    date_from: datetime,
    date_to: datetime,
) -> List[DateRange]:
    """
    Build the concrete date ranges for one participant.

    Working hours are expanded over the window and grouped per day; date
    overrides replace the whole group of any day they fall on. Zero-length
    ranges are removed last, so an empty override cancels a working day
    instead of disappearing before the merge.

    Args:
        availability: Working-hours and date-override rules (models or dicts)
        time_zone: The participant's IANA timezone
        date_from: Start of the window (timezone aware)
        date_to: End of the window (timezone aware)

    Returns:
        Ranges in stable insertion order, expressed in ``time_zone``

    Raises:
        InvalidDateRangeError: If the window is inverted or naive
        InvalidTimezoneError: If ``time_zone`` is unknown
        pydantic.ValidationError: If a rule is malformed
    """
    date_from, date_to = validate_window(date_from, date_to)
    rules = _rules_adapter.validate_python(list(availability))

    working_hours: List[DateRange] = []
    overrides: List[DateRange] = []

    for rule in rules:
        if rule.kind == "working_hours":
            working_hours.extend(expand_working_hours(rule, time_zone, date_from, date_to))
        elif rule.kind == "date_override":
            overrides.append(expand_date_override(rule, time_zone))

    merged = {
        **group_by_calendar_date(working_hours),
        **group_by_calendar_date(overrides),
    }

    results = [
        date_range
        for day_ranges in merged.values()
        for date_range in day_ranges
        if not date_range.is_empty()
    ]

    logger.debug(
        "Built %d date ranges from %d rules (%d working-hours ranges, %d overrides) in %s",
        len(results),
        len(rules),
        len(working_hours),
        len(overrides),
        time_zone,
    )

    return results


def _intersect_two_lists(common: Sequence[DateRange], other: Sequence[DateRange]) -> List[DateRange]:
    """
    Return every pairwise overlap between two lists of ranges.
    No merging or sorting is applied.
    """
    intersections = (
        common_range.intersect(other_range)
        for common_range in common
        for other_range in other
    )
    return [intersection for intersection in intersections if intersection is not None]


def intersect(ranges: Sequence[Sequence[DateRange]]) -> List[DateRange]:
    """
    Calculate the ranges during which every participant is available.

    Starts from the first participant's ranges and folds in each further
    participant. An empty participant list makes the result empty.
    """
    if not ranges:
        return []

    return reduce(_intersect_two_lists, ranges[1:], list(ranges[0]))


def subtract(source_ranges: Iterable[R], excluded_ranges: Sequence[DateRange]) -> List[R]:
    """
    Remove excluded ranges from each source range.

    Each piece left over keeps every other field of its source range
    (payload, or extra fields of a DateRange subclass).

    Example:
    Source: 09:00 - 17:00
    Excluded: [10:00-11:00, 13:00-14:00]
    Result: [09:00-10:00, 11:00-13:00, 14:00-17:00]
    """
    result: List[R] = []

    for source in source_ranges:
        overlapping = sorted(
            (
                excluded for excluded in excluded_ranges
                if excluded.start < source.end and excluded.end > source.start
            ),
            key=lambda r: r.start,
        )

        current_start = source.start

        for excluded in overlapping:
            if excluded.start > current_start:
                result.append(replace(source, start=current_start, end=excluded.start))
            current_start = max(current_start, excluded.end)

        if current_start < source.end:
            result.append(replace(source, start=current_start, end=source.end))

    return result
