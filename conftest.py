"""Shared fixtures: an in-memory station service and a wired-up calendar."""

import os
import random
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from radio_calendar.exceptions import ScheduleNotFoundError, ScheduleServiceError
from radio_calendar.models import Playlist, Schedule
from radio_calendar.mutations import MutationEngine
from radio_calendar.refresh import RefreshLoop
from radio_calendar.store import ScheduleStore


class FakeStationClient:
    """Stands in for StationClient, keeping schedules in a dict.

    Every call is recorded in ``calls`` as ``(method, args)``. Use
    ``fail_next(method)`` to make the next call of that method raise.
    """

    base_url = "http://station.test/api"

    def __init__(self, schedules=None, playlists=None, settings=None, timezone="UTC"):
        self.records = {}
        self.next_id = 1
        self.calls = []
        self.failures = {}
        self.playlists = list(playlists or [])
        self.settings = dict(settings or {})
        self.timezone = timezone
        for sched in schedules or []:
            self.seed(sched)

    def seed(self, schedule: Schedule) -> Schedule:
        if schedule.id is None:
            schedule = schedule.copy(id=self.next_id)
        self.next_id = max(self.next_id, schedule.id + 1)
        self.records[schedule.id] = schedule
        return schedule

    def fail_next(self, method, error=None):
        self.failures[method] = error

    def _call(self, method, *args):
        self.calls.append((method, args))
        if method in self.failures:
            error = self.failures.pop(method)
            if error is None:
                schedule_id = args[0] if args and isinstance(args[0], int) else None
                error = ScheduleServiceError("station unavailable", operation=method,
                                             schedule_id=schedule_id, status_code=500)
            raise error

    def calls_to(self, method):
        return [args for name, args in self.calls if name == method]

    def list_schedules(self):
        self._call("list_schedules")
        return list(self.records.values())

    def create_schedule(self, payload):
        self._call("create_schedule", payload)
        created = Schedule.from_api({**payload, "id": self.next_id})
        self.next_id += 1
        self.records[created.id] = created
        return created

    def update_schedule(self, schedule_id, changes):
        self._call("update_schedule", schedule_id, changes)
        if schedule_id not in self.records:
            raise ScheduleNotFoundError("Schedule not found", operation="update",
                                        schedule_id=schedule_id, status_code=404)
        current = self.records[schedule_id]
        data = {**current.to_payload(), **changes, "id": schedule_id}
        self.records[schedule_id] = Schedule.from_api(data)
        return {"success": True}

    def delete_schedule(self, schedule_id):
        self._call("delete_schedule", schedule_id)
        if schedule_id not in self.records:
            raise ScheduleNotFoundError("Schedule not found", operation="delete",
                                        schedule_id=schedule_id, status_code=404)
        del self.records[schedule_id]

    def bulk_replace(self, payloads):
        self._call("bulk_replace", payloads)
        self.records = {}
        for payload in payloads:
            created = Schedule.from_api({**payload, "id": self.next_id})
            self.next_id += 1
            self.records[created.id] = created
        return len(payloads)

    def notify_reload(self, force=False):
        self.calls.append(("notify_reload", (force,)))

    def list_playlists(self):
        self._call("list_playlists")
        return list(self.playlists)

    def get_station_timezone(self):
        self._call("get_station_timezone")
        return self.timezone

    def get_settings(self):
        self._call("get_settings")
        return dict(self.settings)


@pytest.fixture
def playlists():
    return [
        Playlist(id=1, name="Morning Show", color="#ffaa00"),
        Playlist(id=2, name="Rock Hour", color="#aa0000"),
        Playlist(id=3, name="Jazz Lounge", color="#0000aa"),
        Playlist(id=4, name="Top 40", color="#00aa00"),
    ]


@pytest.fixture
def station(playlists):
    return FakeStationClient(playlists=playlists)


@pytest.fixture
def store(station):
    store = ScheduleStore(station)
    store.reload()
    return store


@pytest.fixture
def refresh(store):
    return RefreshLoop(store, interval=60)


@pytest.fixture
def engine(station, store, refresh):
    return MutationEngine(station, store, refresh, default_block_minutes=60)


@pytest.fixture
def rng():
    return random.Random(1234)
