"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.exceptions import UnknownParticipantError
from .domain.models import AvailabilityRule, resolve_timezone


class DefaultsConfig(BaseModel):
    """Default settings for search."""
    duration_minutes: int = 30
    search_days: int = 7

    @field_validator("duration_minutes", "search_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure durations are positive."""
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value


class Participant(BaseModel):
    """Participant configuration with their weekly schedule."""
    name: str  # Used as alias
    email: str
    timezone: str = "Europe/Berlin"
    availability: List[AvailabilityRule] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is known to pendulum."""
        resolve_timezone(value)
        return value

    def display_name(self) -> str:
        """Get display name."""
        return self.name


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    participants: List[Participant] = Field(default_factory=list)
    busy_times_file: Optional[Path] = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the display timezone is known to pendulum."""
        resolve_timezone(value)
        return value

    @field_validator("participants")
    @classmethod
    def validate_participants(cls, value: List[Participant]) -> List[Participant]:
        """Ensure participant aliases and emails are unique."""
        seen_names: set[str] = set()
        seen_emails: set[str] = set()
        for participant in value:
            name_key = participant.name.lower()
            email_key = participant.email.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate participant name detected: {participant.name}")
            if email_key in seen_emails:
                raise ValueError(f"Duplicate participant email detected: {participant.email}")
            seen_names.add(name_key)
            seen_emails.add(email_key)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from a YAML file.

        A relative ``busy_times_file`` is taken relative to the config file,
        so a config directory can be moved as a whole.

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If the file is not valid YAML or not a mapping
            pydantic.ValidationError: If participants or rules are invalid
        """
        if not config_path.is_file():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Copy config.example.yaml to config.yaml or pass --config."
            )

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls.model_validate(data)

        busy_times_file = config.busy_times_file
        if busy_times_file is not None and not busy_times_file.is_absolute():
            config = config.model_copy(
                update={"busy_times_file": config_path.parent / busy_times_file}
            )

        return config

    def find_participant(self, identifier: str) -> Participant | None:
        """Find a participant by alias or email, ignoring case."""
        key = identifier.strip().lower()
        field = "email" if "@" in key else "name"

        return next(
            (p for p in self.participants if getattr(p, field).lower() == key),
            None,
        )

    def resolve_participant(self, identifier: str) -> Participant:
        """
        Resolve an alias or email to its configured participant.

        Emails must belong to a configured participant too: without one
        there are no availability rules to work with.

        Raises:
            UnknownParticipantError: If nobody matches ``identifier``
        """
        participant = self.find_participant(identifier)
        if participant is None:
            raise UnknownParticipantError(
                f"Unknown participant: '{identifier}'. "
                f"Use a configured name or email (see list-participants)."
            )
        return participant

    def resolve_participants(self, identifiers: Sequence[str]) -> List[Participant]:
        """
        Resolve several identifiers, keeping the first occurrence of each
        participant. All unknown identifiers are reported together.

        Raises:
            UnknownParticipantError: If the list is empty or has unknown entries
        """
        if not identifiers:
            raise UnknownParticipantError("No participants provided.")

        found = {identifier: self.find_participant(identifier) for identifier in identifiers}

        unknown = sorted({identifier for identifier, p in found.items() if p is None})
        if unknown:
            raise UnknownParticipantError(
                f"Unknown participant(s): {', '.join(unknown)}. "
                f"Use configured names or emails (see list-participants)."
            )

        resolved: Dict[str, Participant] = {}
        for participant in found.values():
            resolved.setdefault(participant.email.lower(), participant)

        return list(resolved.values())


def get_default_config_path() -> Path:
    """
    Locate config.yaml: ``$AVAILABILITYFINDER_CONFIG`` if set, else the
    current directory, else the user config directory.
    """
    env_path = os.environ.get("AVAILABILITYFINDER_CONFIG")
    if env_path:
        return Path(env_path).expanduser()

    local_path = Path.cwd() / "config.yaml"
    if local_path.exists():
        return local_path

    return Path.home() / ".config" / "availabilityfinder" / "config.yaml"
