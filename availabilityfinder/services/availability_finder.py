"""
Application services for finding common bookable time.

The service fetches each participant's schedule through a provider adapter and
delegates the interval work to the domain-level date-range functions. This
keeps the CLI thin and allows the provider to be stubbed via a simple
protocol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Protocol, Sequence

from pendulum import DateTime

from ..domain.date_ranges import build_date_ranges, intersect, subtract
from ..domain.models import AvailabilityRule, BookableSlot, DateRange

logger = logging.getLogger(__name__)


@dataclass
class ParticipantSchedule:
    """Everything the engine needs to know about one participant."""
    timezone: str
    availability: List[AvailabilityRule] = field(default_factory=list)
    busy: List[DateRange] = field(default_factory=list)


class ScheduleProviderProtocol(Protocol):
    """Protocol describing the schedule source needed by the service."""

    async def get_schedules(
        self,
        emails: List[str],
        start_time: DateTime,
        end_time: DateTime,
    ) -> Dict[str, ParticipantSchedule]:
        """Return availability rules and busy ranges per participant."""


class AvailabilityFinderService:
    """
    Orchestrates schedule retrieval and the date-range calculation.

    Algorithm per request:
    1. Build each participant's date ranges from their rules, in their zone
    2. Subtract their busy ranges
    3. Intersect across all participants
    4. Filter by minimum duration
    """

    def __init__(self, schedule_provider: ScheduleProviderProtocol) -> None:
        self._schedule_provider = schedule_provider

    async def find_slots(
        self,
        *,
        participants: Sequence[str],
        start_date: DateTime,
        end_date: DateTime,
        min_duration_minutes: int,
    ) -> List[BookableSlot]:
        """
        Retrieve schedules and compute the common bookable slots.
        """
        participant_list = list(participants)

        schedules = await self._schedule_provider.get_schedules(
            emails=participant_list,
            start_time=start_date,
            end_time=end_date,
        )

        return self.calculate_slots(
            participants=participant_list,
            start_date=start_date,
            end_date=end_date,
            schedules=schedules,
            min_duration_minutes=min_duration_minutes,
        )

    def calculate_slots(
        self,
        *,
        participants: Sequence[str],
        start_date: DateTime,
        end_date: DateTime,
        schedules: Dict[str, ParticipantSchedule],
        min_duration_minutes: int,
    ) -> List[BookableSlot]:
        """Calculate common bookable slots from already fetched schedules."""
        participant_list = list(participants)

        if not participant_list:
            return []

        free_ranges: List[List[DateRange]] = [
            self.free_ranges_for(
                schedules.get(participant),
                participant=participant,
                start_date=start_date,
                end_date=end_date,
            )
            for participant in participant_list
        ]

        common = intersect(free_ranges)

        valid_ranges = sorted(
            (r for r in common if r.duration_minutes() >= min_duration_minutes),
            key=lambda r: r.start,
        )

        logger.debug(
            "Found %d common ranges, %d of at least %d minutes",
            len(common),
            len(valid_ranges),
            min_duration_minutes,
        )

        return [
            BookableSlot(date_range=r, participants=participant_list)
            for r in valid_ranges
        ]

    @staticmethod
    def free_ranges_for(
        schedule: ParticipantSchedule | None,
        *,
        participant: str,
        start_date: DateTime,
        end_date: DateTime,
    ) -> List[DateRange]:
        """
        Build one participant's available ranges with busy time carved out.

        A participant the provider knows nothing about has no availability.
        """
        if schedule is None:
            logger.warning("No schedule for participant %s, treating as unavailable", participant)
            return []

        available = build_date_ranges(
            schedule.availability,
            schedule.timezone,
            start_date,
            end_date,
        )
        return subtract(available, schedule.busy)
