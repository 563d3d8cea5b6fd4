"""Data models for Radio Calendar."""

from .playlist import Playlist
from .schedule import AllDays, DaySet, ExplicitDays, Schedule, new_schedule, validate_interval

__all__ = [
    "AllDays",
    "DaySet",
    "ExplicitDays",
    "Playlist",
    "Schedule",
    "new_schedule",
    "validate_interval",
]
