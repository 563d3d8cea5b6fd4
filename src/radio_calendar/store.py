"""In-memory working copy of the station's schedules."""

import logging
import threading
from typing import Iterable, List, Optional

from .exceptions import ScheduleNotFoundError
from .models import Schedule

logger = logging.getLogger(__name__)

class ScheduleStore:
    """Holds the last fetched schedule list.

    A reload replaces the whole list; there is no incremental patching.
    Local edits made with ``apply_local`` stay until the next reload.
    """

    def __init__(self, client=None, schedules: Optional[Iterable[Schedule]] = None):
        self.client = client
        self._lock = threading.Lock()
        self._schedules: List[Schedule] = list(schedules or [])
        self.reload_count = 0

    def reload(self) -> List[Schedule]:
        """Re-fetch every schedule from the station."""
        schedules = self.client.list_schedules()
        self.replace(schedules)
        self.reload_count += 1
        logger.debug(f"Store reloaded with {len(schedules)} schedules")
        return schedules

    def replace(self, schedules: Iterable[Schedule]):
        schedules = list(schedules)
        with self._lock:
            self._schedules = schedules

    def all(self) -> List[Schedule]:
        with self._lock:
            return list(self._schedules)

    def __len__(self):
        with self._lock:
            return len(self._schedules)

    def get(self, schedule_id: int) -> Optional[Schedule]:
        for sched in self.all():
            if sched.id == schedule_id:
                return sched
        return None

    def require(self, schedule_id: int) -> Schedule:
        sched = self.get(schedule_id)
        if sched is None:
            raise ScheduleNotFoundError(f"Schedule {schedule_id} not found",
                                        operation="lookup", schedule_id=schedule_id)
        return sched

    def by_day(self, day: int) -> List[Schedule]:
        """Schedules covering ``day`` (0=Monday, 6=Sunday), active or not."""
        return [s for s in self.all() if s.is_active_on_day(day)]

    def active_on_day(self, day: int) -> List[Schedule]:
        return [s for s in self.by_day(day) if s.is_active]

    def by_playlist(self, playlist_id: int) -> List[Schedule]:
        return [s for s in self.all() if s.playlist_id == playlist_id]

    def live_now(self, clock) -> List[Schedule]:
        """Schedules on air right now, highest priority first."""
        now = clock.now()
        live = [s for s in self.all() if clock.is_live(s, now)]
        live.sort(key=lambda s: s.priority, reverse=True)
        return live

    def apply_local(self, schedule: Schedule):
        """Record an optimistic edit (or addition) ahead of the next reload."""
        with self._lock:
            for i, existing in enumerate(self._schedules):
                if schedule.id is not None and existing.id == schedule.id:
                    self._schedules[i] = schedule
                    return
            self._schedules.append(schedule)

    def discard_local(self, schedule_id: int):
        with self._lock:
            self._schedules = [s for s in self._schedules if s.id != schedule_id]
