"""
Adapters layer - External schedule sources.
"""

from .file_schedule_provider import FileScheduleProvider

__all__ = ["FileScheduleProvider"]
