"""
Tests for domain models.
"""

from datetime import time

import pendulum
import pytest
from pydantic import TypeAdapter, ValidationError

from availabilityfinder.domain.exceptions import InvalidTimezoneError
from availabilityfinder.domain.models import (
    AvailabilityRule,
    BookableSlot,
    DateOverrideRule,
    DateRange,
    WorkingHoursRule,
    resolve_timezone,
    weekday_index,
)


class TestDateRange:
    """Tests for DateRange model."""

    def test_create_valid_date_range(self):
        """Test creating a valid date range."""
        start = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")

        dr = DateRange(start=start, end=end)

        assert dr.start == start
        assert dr.end == end
        assert dr.payload is None
        assert dr.duration_minutes() == 480  # 8 hours

    def test_inverted_date_range_raises_error(self):
        """Test that an inverted range raises ValueError."""
        start = pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")

        with pytest.raises(ValueError, match="must not be after end time"):
            DateRange(start=start, end=end)

    def test_zero_length_range_is_allowed(self):
        """Zero-length ranges are valid and report themselves as empty."""
        point = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")

        dr = DateRange(start=point, end=point)

        assert dr.is_empty()
        assert dr.duration_minutes() == 0

    def test_overlaps(self):
        """Test overlap detection."""
        dr1 = DateRange(
            start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin")
        )
        dr2 = DateRange(
            start=pendulum.parse("2024-11-25 11:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 14:00", tz="Europe/Berlin")
        )
        dr3 = DateRange(
            start=pendulum.parse("2024-11-25 14:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")
        )

        assert dr1.overlaps(dr2)
        assert dr2.overlaps(dr1)
        assert not dr1.overlaps(dr3)
        # Touching ranges do not overlap
        assert not dr2.overlaps(dr3)

    def test_intersect(self):
        """Test intersection calculation."""
        dr1 = DateRange(
            start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin")
        )
        dr2 = DateRange(
            start=pendulum.parse("2024-11-25 11:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 14:00", tz="Europe/Berlin")
        )

        intersection = dr1.intersect(dr2)

        assert intersection is not None
        assert intersection.start == pendulum.parse("2024-11-25 11:00", tz="Europe/Berlin")
        assert intersection.end == pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin")

    def test_intersect_across_timezones(self):
        """Ranges in different zones are compared as instants."""
        berlin = DateRange(
            start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")
        )
        london = DateRange(
            start=pendulum.parse("2024-11-25 15:00", tz="Europe/London"),
            end=pendulum.parse("2024-11-25 18:00", tz="Europe/London")
        )

        intersection = berlin.intersect(london)

        assert intersection is not None
        assert intersection.start == pendulum.parse("2024-11-25 16:00", tz="Europe/Berlin")
        assert intersection.end == pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")

    def test_intersect_no_overlap(self):
        """Test intersection with no overlap returns None."""
        dr1 = DateRange(
            start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin")
        )
        dr2 = DateRange(
            start=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")
        )

        assert dr1.intersect(dr2) is None


class TestRules:
    """Tests for availability rule models."""

    def test_working_hours_rule(self):
        """Times are parsed from strings and days kept as a set."""
        rule = WorkingHoursRule(days=[1, 2, 2], start_time="09:30", end_time="17:00")

        assert rule.kind == "working_hours"
        assert rule.days == {1, 2}
        assert rule.start_time == time(9, 30)
        assert rule.end_time == time(17, 0)

    def test_working_hours_rule_rejects_invalid_days(self):
        """Days outside 0..6 fail validation."""
        with pytest.raises(ValidationError, match="days must be between 0 and 6"):
            WorkingHoursRule(days=[1, 7], start_time="09:00", end_time="17:00")

    def test_working_hours_rule_allows_inverted_times(self):
        """Inverted working hours are legal; they expand to nothing."""
        rule = WorkingHoursRule(days=[1], start_time="17:00", end_time="09:00")

        assert rule.start_time > rule.end_time

    def test_sexagesimal_yaml_times_are_minutes(self):
        """Integers are read as minutes since midnight."""
        rule = WorkingHoursRule(days=[1], start_time=570, end_time=1020)

        assert rule.start_time == time(9, 30)
        assert rule.end_time == time(17, 0)

    def test_date_override_rule(self):
        """An override with equal times is a valid cancellation."""
        rule = DateOverrideRule(date="2024-11-26", start_time="00:00", end_time="00:00")

        assert rule.kind == "date_override"
        assert rule.date == pendulum.date(2024, 11, 26)

    def test_date_override_rejects_inverted_times(self):
        """An override may not end before it starts."""
        with pytest.raises(ValidationError, match="end_time must not be earlier"):
            DateOverrideRule(date="2024-11-26", start_time="12:00", end_time="10:00")

    def test_rules_are_discriminated_by_kind(self):
        """Raw dicts are dispatched on their kind tag."""
        adapter = TypeAdapter(AvailabilityRule)

        working = adapter.validate_python(
            {"kind": "working_hours", "days": [1], "start_time": "09:00", "end_time": "17:00"}
        )
        override = adapter.validate_python(
            {"kind": "date_override", "date": "2024-11-26", "start_time": "09:00", "end_time": "10:00"}
        )

        assert isinstance(working, WorkingHoursRule)
        assert isinstance(override, DateOverrideRule)

    def test_unknown_kind_is_rejected(self):
        """Structural guessing is not attempted for unknown tags."""
        adapter = TypeAdapter(AvailabilityRule)

        with pytest.raises(ValidationError):
            adapter.validate_python({"kind": "holiday", "date": "2024-11-26"})


class TestHelpers:
    """Tests for timezone and weekday helpers."""

    def test_weekday_index_starts_on_sunday(self):
        """0 is Sunday, 1 is Monday, 6 is Saturday."""
        assert weekday_index(pendulum.parse("2024-11-24", tz="Europe/Berlin")) == 0
        assert weekday_index(pendulum.parse("2024-11-25", tz="Europe/Berlin")) == 1
        assert weekday_index(pendulum.parse("2024-11-30", tz="Europe/Berlin")) == 6

    def test_resolve_unknown_timezone(self):
        """Unknown zone names raise a domain error."""
        with pytest.raises(InvalidTimezoneError):
            resolve_timezone("Mars/Olympus_Mons")


class TestBookableSlot:
    """Tests for BookableSlot model."""

    def test_format_display(self):
        """Slots render weekday, date, times and duration."""
        slot = BookableSlot(
            date_range=DateRange(
                start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
                end=pendulum.parse("2024-11-25 10:30", tz="Europe/Berlin"),
            ),
            participants=["a@example.com"],
        )

        assert slot.format_display() == "Monday, 2024-11-25 | 09:00 - 10:30 (90 min)"

    def test_format_display_in_other_timezone(self):
        """Slots can be rendered in a display timezone."""
        slot = BookableSlot(
            date_range=DateRange(
                start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
                end=pendulum.parse("2024-11-25 10:00", tz="Europe/Berlin"),
            ),
            participants=["a@example.com"],
        )

        assert slot.format_display("Europe/London") == "Monday, 2024-11-25 | 08:00 - 09:00 (60 min)"
