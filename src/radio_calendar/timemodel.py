"""Time-of-day helpers and the station clock.

Times of day are handled as integer minutes since local midnight. ``1440``
is a valid end boundary and always renders as ``"24:00"`` so that a block
running through midnight never turns into ``"00:00"`` of the next day.
Day indexes run Monday = 0 through Sunday = 6, matching
``datetime.weekday()``.
"""

import logging
import re
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import config
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
WEEKDAYS = (0, 1, 2, 3, 4)
ALL_DAY_INDEXES = (0, 1, 2, 3, 4, 5, 6)

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def to_minutes(value: str) -> int:
    """Convert ``HH:MM`` (or the service's ``HH:MM:SS``) to minutes of day."""
    match = _TIME_RE.match(str(value).strip())
    if not match:
        raise ValidationError(f"Invalid time '{value}'. Use HH:MM format")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 24 or minutes > 59:
        raise ValidationError(f"Invalid time '{value}'")

    total = hours * 60 + minutes
    if total > MINUTES_PER_DAY:
        raise ValidationError(f"Time '{value}' is past 24:00")
    return total


def from_minutes(total: int) -> str:
    """Convert minutes of day back to ``HH:MM``; 1440 becomes ``24:00``."""
    if total < 0 or total > MINUTES_PER_DAY:
        raise ValidationError(f"Minute {total} is outside 0-{MINUTES_PER_DAY}")
    if total == MINUTES_PER_DAY:
        return "24:00"
    hours, minutes = divmod(total, 60)
    return f"{hours:02d}:{minutes:02d}"


def snap(minutes: int, step: Optional[int] = None) -> int:
    """Round to the nearest multiple of ``step`` (quarter hours by default)."""
    step = step or config.SNAP_MINUTES
    # Half-up rounding; Python's round() would send 7.5 and 22.5 different ways
    return ((minutes + step // 2) // step) * step


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def format_time_12h(value: str) -> str:
    """Render ``HH:MM`` as e.g. ``2:30 PM``."""
    total = to_minutes(value)
    hours, minutes = divmod(total, 60)
    suffix = "PM" if 12 <= hours < 24 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {suffix}"


def validate_day(day: int) -> int:
    if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
        raise ValidationError(f"Day index must be 0-6 (Mon=0 … Sun=6), got {day!r}")
    return day


def resolve_timezone(name: Optional[str]) -> ZoneInfo:
    """Look up a timezone, falling back to UTC for unknown names."""
    try:
        return ZoneInfo(name or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown station timezone '{name}', using UTC")
        return ZoneInfo("UTC")


def _station_local(now: datetime, tz: Optional[ZoneInfo]) -> datetime:
    # Naive datetimes are already station-local
    if now.tzinfo is None or tz is None:
        return now
    return now.astimezone(tz)


def current_day_index(now: datetime, tz: Optional[ZoneInfo] = None) -> int:
    """Day of week at the station (0=Monday, 6=Sunday)."""
    return _station_local(now, tz).weekday()


def current_date(now: datetime, tz: Optional[ZoneInfo] = None) -> date:
    return _station_local(now, tz).date()


def current_minute_of_day(now: datetime, tz: Optional[ZoneInfo] = None) -> int:
    """Minutes since midnight at the station."""
    local = _station_local(now, tz)
    return local.hour * 60 + local.minute


def is_live_now(schedule, today: int, now_minute: int, today_date: Optional[date] = None) -> bool:
    """Check whether a schedule is on air at ``now_minute`` of day ``today``.

    When ``today_date`` is given, schedules outside their date range are off air.
    """
    if not schedule.is_active or not schedule.playlist_active:
        return False
    if not schedule.is_active_on_day(today):
        return False
    if today_date is not None and not schedule.covers_date(today_date):
        return False

    start = schedule.start_minutes
    end = schedule.end_minutes
    if end <= start:
        # Crosses midnight in wall-clock terms
        end += MINUTES_PER_DAY
    return start <= now_minute < end


class StationClock:
    """Reads the current day and time in the station's timezone."""

    def __init__(self, timezone: Optional[str] = None):
        self.timezone_name = timezone or config.STATION_TIMEZONE
        self.tz = resolve_timezone(self.timezone_name)

    def set_timezone(self, name: str):
        self.timezone_name = name
        self.tz = resolve_timezone(name)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self, now: Optional[datetime] = None) -> int:
        return current_day_index(now or self.now(), self.tz)

    def minute_of_day(self, now: Optional[datetime] = None) -> int:
        return current_minute_of_day(now or self.now(), self.tz)

    def local_date(self, now: Optional[datetime] = None) -> date:
        return current_date(now or self.now(), self.tz)

    def is_live(self, schedule, now: Optional[datetime] = None) -> bool:
        now = now or self.now()
        return is_live_now(schedule, self.today(now), self.minute_of_day(now), self.local_date(now))
