"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_finder import (
    AvailabilityFinderService,
    ParticipantSchedule,
    ScheduleProviderProtocol,
)

__all__ = ["AvailabilityFinderService", "ParticipantSchedule", "ScheduleProviderProtocol"]
