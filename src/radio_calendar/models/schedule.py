"""Schedule model for recurring playlist time slots."""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, FrozenSet, Iterable, Optional

from ..exceptions import ValidationError
from ..timemodel import ALL_DAY_INDEXES, from_minutes, to_minutes, validate_day


class DaySet:
    """Days of the week a schedule repeats on (0=Monday, 6=Sunday).

    Either every day (``AllDays``) or an explicit, non-empty set of day
    indexes (``ExplicitDays``). The station encodes every day as ``null``.
    """

    @staticmethod
    def from_wire(value) -> "DaySet":
        if value is None:
            return AllDays()
        return ExplicitDays(value)

    @staticmethod
    def of(*days: int) -> "ExplicitDays":
        return ExplicitDays(days)

    def covers(self, day: int) -> bool:
        raise NotImplementedError

    def as_set(self) -> FrozenSet[int]:
        raise NotImplementedError

    def to_wire(self):
        raise NotImplementedError

    def is_single_day(self) -> bool:
        return len(self.as_set()) == 1

    def without(self, day: int) -> FrozenSet[int]:
        """Days left after removing ``day``; may be empty."""
        return self.as_set() - {day}

    def __iter__(self):
        return iter(sorted(self.as_set()))

    def __len__(self):
        return len(self.as_set())


class AllDays(DaySet):
    """Every day of the week."""

    def covers(self, day: int) -> bool:
        return 0 <= day <= 6

    def as_set(self) -> FrozenSet[int]:
        return frozenset(ALL_DAY_INDEXES)

    def to_wire(self):
        return None

    def __eq__(self, other):
        return isinstance(other, AllDays)

    def __hash__(self):
        return hash("all-days")

    def __repr__(self):
        return "AllDays()"


class ExplicitDays(DaySet):
    """A specific, non-empty set of days."""

    def __init__(self, days: Iterable[int]):
        days = frozenset(validate_day(d) for d in days)
        if not days:
            raise ValidationError("A schedule must cover at least one day")
        self.days = days

    def covers(self, day: int) -> bool:
        return day in self.days

    def as_set(self) -> FrozenSet[int]:
        return self.days

    def to_wire(self):
        return sorted(self.days)

    def __eq__(self, other):
        return isinstance(other, ExplicitDays) and other.days == self.days

    def __hash__(self):
        return hash(self.days)

    def __repr__(self):
        return f"ExplicitDays({sorted(self.days)})"


@dataclass
class Schedule:
    """A recurring assignment of a playlist to a time slot."""

    playlist_id: int
    start_time: str
    end_time: str
    days: DaySet = field(default_factory=AllDays)
    priority: int = 0
    is_active: bool = True
    id: Optional[int] = None
    # Optional season bounds, inclusive, in station-local dates
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    # Read-only details joined in by the station's list endpoint
    name: Optional[str] = None
    playlist_name: Optional[str] = None
    playlist_color: Optional[str] = None
    playlist_active: bool = True

    def __post_init__(self):
        # The station may send HH:MM:SS
        self.start_time = from_minutes(to_minutes(self.start_time))
        self.end_time = from_minutes(to_minutes(self.end_time))
        self.start_date = parse_date(self.start_date)
        self.end_date = parse_date(self.end_date)
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError(f"start_date {self.start_date} is after end_date {self.end_date}")

    def __repr__(self):
        return f"<Schedule(id={self.id}, playlist={self.playlist_id}, days={self.days!r}, {self.start_time}-{self.end_time})>"

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end_time)

    @property
    def duration(self) -> int:
        """Length in minutes; blocks that wrap midnight count through to the next day."""
        length = self.end_minutes - self.start_minutes
        if length <= 0:
            length += 24 * 60
        return length

    def is_active_on_day(self, day: int) -> bool:
        """Check if schedule is active on given day (0=Monday, 6=Sunday)."""
        return self.days.covers(day)

    def covers_date(self, day: date) -> bool:
        """Check the date falls inside the schedule's season, if it has one."""
        if self.start_date and day < self.start_date:
            return False
        if self.end_date and day > self.end_date:
            return False
        return True

    def copy(self, **changes) -> "Schedule":
        return replace(self, **changes)

    def to_payload(self) -> Dict[str, Any]:
        """Body for the station's create and bulk endpoints."""
        return {
            "playlist_id": self.playlist_id,
            "days_of_week": self.days.to_wire(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "priority": self.priority,
            "is_active": self.is_active,
        }

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Schedule":
        """Build a schedule from a station list entry."""
        return cls(
            id=data.get("id"),
            playlist_id=int(data["playlist_id"]),
            days=DaySet.from_wire(data.get("days_of_week")),
            start_time=data["start_time"],
            end_time=data["end_time"],
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            priority=int(data.get("priority") or 0),
            is_active=bool(data.get("is_active", True)),
            name=data.get("name"),
            playlist_name=data.get("playlist_name"),
            playlist_color=data.get("playlist_color"),
            playlist_active=bool(data.get("playlist_active", True)),
        )


def new_schedule(
    playlist_id: int,
    days: DaySet,
    start_minutes: int,
    end_minutes: int,
    priority: int = 0,
    is_active: bool = True,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Schedule:
    """Create a not-yet-saved schedule, rejecting zero-length or reversed slots."""
    validate_interval(start_minutes, end_minutes)
    return Schedule(
        playlist_id=playlist_id,
        days=days,
        start_time=from_minutes(start_minutes),
        end_time=from_minutes(end_minutes),
        priority=priority,
        is_active=is_active,
        start_date=start_date,
        end_date=end_date,
    )


def validate_interval(start_minutes: int, end_minutes: int):
    if not 0 <= start_minutes <= 24 * 60 or not 0 <= end_minutes <= 24 * 60:
        raise ValidationError(f"Slot {start_minutes}-{end_minutes} is outside the day")
    if end_minutes <= start_minutes:
        raise ValidationError(
            f"Slot {from_minutes(start_minutes)}-{from_minutes(end_minutes)} must end after it starts"
        )


def parse_date(value) -> Optional[date]:
    """Accept a date, an ISO ``YYYY-MM-DD`` string (timestamps are cut), or empty."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise ValidationError(f"Invalid date '{value}'. Use YYYY-MM-DD format") from e
