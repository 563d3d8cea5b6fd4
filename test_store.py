#!/usr/bin/env python3
"""Test the in-memory schedule store."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from radio_calendar.exceptions import ScheduleNotFoundError, ValidationError
from radio_calendar.models import AllDays, ExplicitDays, Schedule


def test_reload_replaces_everything(station, store):
    assert len(store) == 0
    station.seed(Schedule(playlist_id=2, start_time="09:00", end_time="10:00", days=ExplicitDays([0])))
    station.seed(Schedule(playlist_id=3, start_time="10:00", end_time="11:00"))

    store.reload()

    assert len(store) == 2
    assert store.reload_count == 2


def test_by_day_expands_all_days(station, store):
    station.seed(Schedule(playlist_id=2, start_time="09:00", end_time="10:00", days=ExplicitDays([0, 2])))
    station.seed(Schedule(playlist_id=3, start_time="10:00", end_time="11:00", days=AllDays()))
    station.seed(Schedule(playlist_id=4, start_time="12:00", end_time="13:00", days=ExplicitDays([0]),
                          is_active=False))
    store.reload()

    assert {s.playlist_id for s in store.by_day(0)} == {2, 3, 4}
    assert {s.playlist_id for s in store.active_on_day(0)} == {2, 3}
    assert {s.playlist_id for s in store.by_day(1)} == {3}
    assert {s.playlist_id for s in store.by_day(6)} == {3}


def test_by_playlist(station, store):
    station.seed(Schedule(playlist_id=2, start_time="09:00", end_time="10:00"))
    station.seed(Schedule(playlist_id=2, start_time="12:00", end_time="13:00"))
    station.seed(Schedule(playlist_id=3, start_time="10:00", end_time="11:00"))
    store.reload()

    assert len(store.by_playlist(2)) == 2


def test_require_unknown_id(store):
    with pytest.raises(ScheduleNotFoundError) as excinfo:
        store.require(99)
    assert excinfo.value.schedule_id == 99


def test_apply_local_replaces_by_id(station, store):
    seeded = station.seed(Schedule(playlist_id=2, start_time="09:00", end_time="10:00"))
    store.reload()

    store.apply_local(seeded.copy(start_time="11:00", end_time="12:00"))

    assert len(store) == 1
    assert store.get(seeded.id).start_time == "11:00"


def test_apply_local_appends_new(store):
    store.apply_local(Schedule(id=50, playlist_id=2, start_time="09:00", end_time="10:00"))
    assert store.get(50) is not None


def test_discard_local(station, store):
    seeded = station.seed(Schedule(playlist_id=2, start_time="09:00", end_time="10:00"))
    store.reload()

    store.discard_local(seeded.id)

    assert store.get(seeded.id) is None


def test_service_time_format_is_normalised(station, store):
    station.records[7] = Schedule.from_api({
        "id": 7, "playlist_id": 2, "days_of_week": None,
        "start_time": "09:00:00", "end_time": "24:00:00",
    })
    store.reload()

    sched = store.require(7)
    assert sched.start_time == "09:00"
    assert sched.end_time == "24:00"
    assert sched.days == AllDays()


def test_service_dates_round_trip(station, store):
    station.records[8] = Schedule.from_api({
        "id": 8, "playlist_id": 2, "days_of_week": [0],
        "start_time": "09:00", "end_time": "10:00",
        "start_date": "2024-06-01", "end_date": "2024-08-31T00:00:00",
    })
    store.reload()

    payload = store.require(8).to_payload()
    assert payload["start_date"] == "2024-06-01"
    assert payload["end_date"] == "2024-08-31"


def test_reversed_dates_rejected():
    with pytest.raises(ValidationError):
        Schedule(playlist_id=2, start_time="09:00", end_time="10:00",
                 start_date="2024-09-01", end_date="2024-08-31")
    with pytest.raises(ValidationError):
        Schedule(playlist_id=2, start_time="09:00", end_time="10:00", start_date="summer")
