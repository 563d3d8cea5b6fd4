"""Overlap detection between schedule slots."""

from dataclasses import dataclass
from typing import Optional

from .models import Schedule, validate_interval
from .timemodel import validate_day


@dataclass(frozen=True)
class Interval:
    """A candidate slot ``[start, end)`` on one day."""

    day: int
    start: int
    end: int

    def __post_init__(self):
        validate_day(self.day)
        validate_interval(self.start, self.end)


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open overlap test; slots that only touch (a_end == b_start) do not overlap."""
    return a_start < b_end and b_start < a_end


def find_conflict(store, candidate: Interval, exclude_id: Optional[int] = None) -> Optional[Schedule]:
    """First active schedule on ``candidate.day`` that overlaps it, if any."""
    for sched in store.active_on_day(candidate.day):
        if exclude_id is not None and sched.id == exclude_id:
            continue
        if intervals_overlap(candidate.start, candidate.end, sched.start_minutes, sched.end_minutes):
            return sched
    return None


def conflicts(store, candidate: Interval, exclude_id: Optional[int] = None) -> bool:
    return find_conflict(store, candidate, exclude_id) is not None
