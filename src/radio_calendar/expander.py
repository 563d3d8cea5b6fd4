"""Copies an existing schedule onto more days ("Apply to...")."""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

from .conflicts import Interval, find_conflict
from .exceptions import ValidationError
from .models import ExplicitDays, Schedule
from .timemodel import ALL_DAY_INDEXES, DAYS, MINUTES_PER_DAY, format_time_12h, from_minutes, validate_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayPattern:
    """Target days for "Apply to...". ``days`` of None means every day."""

    label: str
    days: Optional[FrozenSet[int]] = None
    full_day: bool = False

    @classmethod
    def of(cls, *days: int, label: str = "") -> "DayPattern":
        for day in days:
            validate_day(day)
        if not days:
            raise ValidationError("A day pattern needs at least one day")
        return cls(label=label or ", ".join(DAYS[d] for d in sorted(set(days))), days=frozenset(days))

    @property
    def requested_days(self) -> FrozenSet[int]:
        return frozenset(ALL_DAY_INDEXES) if self.days is None else self.days


FULL_DAY = DayPattern("24 hours", full_day=True)
ALL_DAYS = DayPattern("All days")
MWF = DayPattern.of(0, 2, 4, label="MWF")
TTH = DayPattern.of(1, 3, label="TTh")
WEEKENDS = DayPattern.of(5, 6, label="Weekends")

PRESETS = [FULL_DAY, ALL_DAYS, MWF, TTH, WEEKENDS]


@dataclass
class ApplyResult:
    """What "Apply to..." did. Skipped days are never silently dropped."""

    added: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    already_covered: List[int] = field(default_factory=list)
    created: List[Schedule] = field(default_factory=list)
    widened: bool = False

    @property
    def message(self) -> str:
        if self.widened:
            return "Set to 24 hours"
        if not self.added and not self.skipped:
            return "Already on all requested days"
        if not self.added:
            return f"All {len(self.skipped)} day(s) have overlapping schedules, skipped"
        msg = "Added to " + ", ".join(DAYS[d] for d in self.added)
        if self.skipped:
            msg += f" ({len(self.skipped)} skipped)"
        return msg


class PatternExpander:
    """Extends a schedule to a day pattern without double-booking."""

    def __init__(self, engine):
        self.engine = engine
        self.client = engine.client
        self.store = engine.store

    def apply(self, schedule: Schedule, pattern: DayPattern) -> ApplyResult:
        if schedule.id is None:
            raise ValidationError("Cannot apply a pattern to an unsaved schedule")
        if pattern.full_day:
            return self._widen_to_full_day(schedule)
        return self._add_days(schedule, pattern.requested_days)

    def _widen_to_full_day(self, schedule: Schedule) -> ApplyResult:
        # Keeps the same days, so nothing new can be double-booked
        changes = {"start_time": "00:00", "end_time": from_minutes(MINUTES_PER_DAY)}
        self.store.apply_local(schedule.copy(**changes))
        self.client.update_schedule(schedule.id, changes)
        self.engine.after_commit()
        return ApplyResult(widened=True)

    def _add_days(self, schedule: Schedule, requested: FrozenSet[int]) -> ApplyResult:
        existing = schedule.days.as_set()
        result = ApplyResult(already_covered=sorted(requested & existing))
        start, end = schedule.start_minutes, schedule.end_minutes

        for day in sorted(requested - existing):
            clash = find_conflict(self.store, Interval(day, start, end), exclude_id=schedule.id)
            if clash is not None:
                logger.info(f"Not adding schedule {schedule.id} to {DAYS[day]}: "
                            f"overlaps schedule {clash.id} "
                            f"({format_time_12h(clash.start_time)}-{format_time_12h(clash.end_time)})")
                result.skipped.append(day)
            else:
                result.added.append(day)

        if not result.added:
            logger.info(f"Apply to days for schedule {schedule.id}: {result.message}")
            return result

        for day in result.added:
            sibling = schedule.copy(id=None, days=ExplicitDays([day]), is_active=True)
            created = self.client.create_schedule(sibling.to_payload())
            self.store.apply_local(created)
            result.created.append(created)

        logger.info(f"Apply to days for schedule {schedule.id}: {result.message}")
        self.engine.after_commit()
        return result
