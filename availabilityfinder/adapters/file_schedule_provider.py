"""
Schedule provider backed by the YAML configuration and a JSON busy-times file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

from ..config import AppConfig
from ..domain.exceptions import ScheduleProviderError
from ..domain.models import DateRange
from ..services.availability_finder import ParticipantSchedule

logger = logging.getLogger(__name__)


class FileScheduleProvider:
    """
    Provider that reads availability rules from the configured participants
    and busy times from a JSON file.

    The busy-times file holds a list of objects::

        [{"email": "alice@example.com", "start": "2024-11-25 10:00", "end": "2024-11-25 11:00"}]

    Times without an offset are read in the participant's timezone.
    """

    def __init__(self, config: AppConfig, busy_times_path: Optional[Path] = None):
        """
        Initialize the provider.

        Args:
            config: Application configuration holding the participants
            busy_times_path: JSON file with busy times; defaults to the
                configured ``busy_times_file``. A missing file means nobody is busy.
        """
        self.config = config
        self.busy_times_path = busy_times_path or config.busy_times_file
        self.busy_entries = self._load_busy_entries()

    def _load_busy_entries(self) -> List[Dict[str, Any]]:
        """Load raw busy entries from the JSON file."""
        if self.busy_times_path is None or not self.busy_times_path.exists():
            return []

        try:
            with open(self.busy_times_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            # ValueError covers both bad JSON and bad UTF-8
            raise ScheduleProviderError(
                f"Could not read busy times from {self.busy_times_path}: {exc}"
            ) from exc

        if not isinstance(data, list):
            raise ScheduleProviderError("Busy times file must contain a list at the root level.")

        return data

    def _parse_busy_entry(self, entry: Any, timezone: str) -> DateRange | None:
        """Parse one busy entry, or return None if it is malformed."""
        try:
            start = pendulum.parse(entry["start"], tz=timezone)
            end = pendulum.parse(entry["end"], tz=timezone)
            # parse also yields durations, intervals and plain times
            if not isinstance(start, DateTime) or not isinstance(end, DateTime):
                raise ValueError("start and end must be date-times")
            return DateRange(start=start, end=end)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping invalid busy entry %r: %s", entry, exc)
            return None

    async def get_schedules(
        self,
        emails: List[str],
        start_time: DateTime,
        end_time: DateTime,
    ) -> Dict[str, ParticipantSchedule]:
        """
        Collect the schedule of every known participant.

        Args:
            emails: List of participant email addresses
            start_time: Start of the time window
            end_time: End of the time window

        Returns:
            Dictionary mapping email -> ParticipantSchedule. Unknown emails
            are left out.
        """
        schedules: Dict[str, ParticipantSchedule] = {}

        for email in emails:
            participant = self.config.find_participant(email)
            if participant is None:
                logger.warning("Participant %s is not configured", email)
                continue

            busy: List[DateRange] = []
            for entry in self.busy_entries:
                if not isinstance(entry, dict) or str(entry.get("email", "")).lower() != email.lower():
                    continue

                busy_range = self._parse_busy_entry(entry, participant.timezone)

                # Only keep busy times that overlap the requested window
                if busy_range and busy_range.start < end_time and busy_range.end > start_time:
                    busy.append(busy_range)

            schedules[email] = ParticipantSchedule(
                timezone=participant.timezone,
                availability=list(participant.availability),
                busy=busy,
            )

        return schedules
