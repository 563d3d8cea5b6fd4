"""Generates a whole week of schedules at once ("Surprise Me").

Reserved playlists (matched by keyword) get fixed slots first: an early
morning slot every day and a lunch slot on two or three random weekdays.
The rest of each day's window is cut into equal blocks and handed out to
the regular playlists. Days are filled strictly Monday to Sunday because
each day avoids repeating what played at the same time the day before.

The result never overlaps itself, so it is not run through the conflict
detector; it replaces every existing schedule in one bulk call.
"""

import logging
import random
from collections import Counter
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import config
from .conflicts import intervals_overlap
from .exceptions import ScheduleServiceError, ValidationError
from .models import ExplicitDays, Playlist, Schedule
from .timemodel import ALL_DAY_INDEXES, DAYS, WEEKDAYS, from_minutes

logger = logging.getLogger(__name__)

DAILY_RESERVED_WINDOW = (4 * 60, 6 * 60)
LUNCH_RESERVED_WINDOW = (11 * 60, 13 * 60)
LUNCH_DAY_COUNTS = (2, 3)

RESERVED_KEYWORDS_SETTING = "schedule_reserved_keywords"


@dataclass(frozen=True)
class Slot:
    """One generated block on one day."""

    day: int
    start: int
    end: int
    playlist_id: int
    reserved: bool = False

    def to_schedule(self) -> Schedule:
        return Schedule(
            playlist_id=self.playlist_id,
            days=ExplicitDays([self.day]),
            start_time=from_minutes(self.start),
            end_time=from_minutes(self.end),
        )


@dataclass
class SchedulePlan:
    slots: List[Slot] = field(default_factory=list)
    reserved_playlists: List[Playlist] = field(default_factory=list)
    lunch_days: List[int] = field(default_factory=list)

    def for_day(self, day: int) -> List[Slot]:
        return sorted((s for s in self.slots if s.day == day), key=lambda s: s.start)

    def schedules(self) -> List[Schedule]:
        return [slot.to_schedule() for slot in self.slots]

    def payloads(self) -> List[dict]:
        return [sched.to_payload() for sched in self.schedules()]

    def __len__(self):
        return len(self.slots)


def partition_playlists(playlists: Iterable[Playlist], keywords: Sequence[str]) -> Tuple[List[Playlist], List[Playlist]]:
    """Split playlists into (reserved, regular) by case-insensitive name match."""
    reserved, regular = [], []
    for playlist in playlists:
        if keywords and playlist.matches_keyword(keywords):
            reserved.append(playlist)
        else:
            regular.append(playlist)
    return reserved, regular


def free_ranges(window: Tuple[int, int], taken: Iterable[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Parts of ``window`` not covered by any ``taken`` range."""
    ranges = []
    cursor, window_end = window
    for start, end in sorted(taken):
        if cursor < start:
            ranges.append((cursor, min(start, window_end)))
        cursor = max(cursor, end)
    if cursor < window_end:
        ranges.append((cursor, window_end))
    return [(s, e) for s, e in ranges if s < e]


def tile(range_start: int, range_end: int, block_minutes: int) -> List[Tuple[int, int]]:
    """Cut a range into consecutive blocks; the last one is cut short at the range end."""
    chunks = []
    cursor = range_start
    while cursor < range_end:
        chunk_end = min(cursor + block_minutes, range_end)
        chunks.append((cursor, chunk_end))
        cursor = chunk_end
    return chunks


class AutoScheduler:
    """Builds and submits a full week's replacement schedule."""

    def __init__(self, engine=None, rng: Optional[random.Random] = None):
        self.engine = engine
        self.rng = rng or random.Random()

    @staticmethod
    def validate(start_hour: int, end_hour: int, block_minutes: int):
        if not 0 <= start_hour < end_hour <= 24:
            raise ValidationError("End hour must be after start hour (0-24)")
        if block_minutes <= 0:
            raise ValidationError("Block duration must be positive")

    def plan(self, start_hour: int, end_hour: int, block_minutes: int,
             playlists: Iterable[Playlist], keywords: Sequence[str] = ()) -> SchedulePlan:
        """Work out every slot for the week without touching the station."""
        self.validate(start_hour, end_hour, block_minutes)
        active = [p for p in playlists if p.is_active]
        if not active:
            raise ValidationError("No active playlists available")

        reserved, regular = partition_playlists(active, keywords)
        if not reserved:
            regular = active
        pool = regular or active

        window = (start_hour * 60, end_hour * 60)
        plan = SchedulePlan(reserved_playlists=reserved)
        reserved_windows = self._reserved_windows(window, plan) if reserved else {}
        usage: Counter = Counter()
        last_reserved_id = None
        previous_day: List[Slot] = []

        for day in ALL_DAY_INDEXES:
            day_slots = []

            for start, end in reserved_windows.get(day, []):
                pick = self._pick_reserved(reserved, last_reserved_id)
                last_reserved_id = pick.id
                day_slots.append(Slot(day, start, end, pick.id, reserved=True))

            taken = [(s.start, s.end) for s in day_slots]
            previous_pick = None
            for range_start, range_end in free_ranges(window, taken):
                for start, end in tile(range_start, range_end, block_minutes):
                    same_time_yesterday = {
                        s.playlist_id for s in previous_day
                        if intervals_overlap(start, end, s.start, s.end)
                    }
                    pick = self._pick_regular(pool, active, previous_pick, same_time_yesterday, usage)
                    usage[pick.id] += 1
                    previous_pick = pick.id
                    day_slots.append(Slot(day, start, end, pick.id))

            day_slots.sort(key=lambda s: s.start)
            plan.slots.extend(day_slots)
            previous_day = day_slots

        logger.info(f"Planned {len(plan)} slots from {from_minutes(window[0])} to {from_minutes(window[1])} "
                    f"in {block_minutes}-minute blocks ({len(reserved)} reserved playlists)")
        return plan

    def _reserved_windows(self, window: Tuple[int, int], plan: SchedulePlan) -> Dict[int, List[Tuple[int, int]]]:
        windows: Dict[int, List[Tuple[int, int]]] = {day: [] for day in ALL_DAY_INDEXES}

        daily = (max(DAILY_RESERVED_WINDOW[0], window[0]), min(DAILY_RESERVED_WINDOW[1], window[1]))
        if daily[0] < daily[1]:
            for day in ALL_DAY_INDEXES:
                windows[day].append(daily)

        lunch = (max(LUNCH_RESERVED_WINDOW[0], window[0]), min(LUNCH_RESERVED_WINDOW[1], window[1]))
        if lunch[0] < lunch[1]:
            count = self.rng.choice(LUNCH_DAY_COUNTS)
            plan.lunch_days = sorted(self.rng.sample(WEEKDAYS, count))
            for day in plan.lunch_days:
                windows[day].append(lunch)
            logger.debug(f"Lunch slots on {', '.join(DAYS[d] for d in plan.lunch_days)}")

        return windows

    def _pick_reserved(self, reserved: List[Playlist], last_id: Optional[int]) -> Playlist:
        candidates = reserved
        if len(reserved) > 1:
            candidates = [p for p in reserved if p.id != last_id]
        return self.rng.choice(candidates)

    def _pick_regular(self, pool: List[Playlist], active: List[Playlist], previous_id: Optional[int],
                      yesterday_ids: set, usage: Counter) -> Playlist:
        """Choose a playlist for one block, spreading plays evenly.

        Falls back to every active playlist when the pool is exhausted by the
        exclusions, so a block is never left empty.
        """
        def allowed(playlist):
            return playlist.id != previous_id and playlist.id not in yesterday_ids

        candidates = [p for p in pool if allowed(p)]
        if not candidates:
            candidates = [p for p in active if allowed(p)]
        if not candidates:
            candidates = [p for p in active if p.id != previous_id]
        if not candidates:
            candidates = active

        fewest = min(usage[p.id] for p in candidates)
        return self.rng.choice([p for p in candidates if usage[p.id] == fewest])

    def resolve_keywords(self) -> List[str]:
        """Reserved keywords from the station settings, else from local config."""
        try:
            settings = self.engine.client.get_settings()
        except ScheduleServiceError as e:
            logger.warning(f"Could not read station settings, using configured keywords: {e}")
            settings = {}
        return config.reserved_keywords(settings.get(RESERVED_KEYWORDS_SETTING))

    def run(self, start_hour: int, end_hour: int, block_minutes: int,
            playlists: Optional[Iterable[Playlist]] = None,
            keywords: Optional[Sequence[str]] = None) -> int:
        """Replace every schedule with a freshly generated week. Returns the count created."""
        self.validate(start_hour, end_hour, block_minutes)
        client = self.engine.client
        if playlists is None:
            playlists = client.list_playlists()
        if keywords is None:
            keywords = self.resolve_keywords()

        plan = self.plan(start_hour, end_hour, block_minutes, playlists, keywords)

        refresh = self.engine.refresh
        with refresh.bulk_operation() if refresh else nullcontext():
            created = client.bulk_replace(plan.payloads())
            logger.info(f"✅ Surprise schedule submitted: {created} schedules created")
            self.engine.after_commit(force=True)
        return created
