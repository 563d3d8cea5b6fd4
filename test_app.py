#!/usr/bin/env python3
"""Test the calendar application lifecycle."""

import os
import random
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from radio_calendar.app import CalendarApp
from radio_calendar.config import Config
from radio_calendar.models import Schedule


@pytest.fixture
def app(station):
    station.timezone = "Europe/London"
    station.seed(Schedule(playlist_id=2, start_time="09:00", end_time="10:00"))
    return CalendarApp(client=station, rng=random.Random(3))


def test_setup_reads_station_timezone(app):
    app.setup(configure_logging=False)
    assert app.clock.timezone_name == "Europe/London"


def test_mount_and_teardown(app):
    app.refresh.interval = 60

    with app:
        assert app.mounted
        assert app.refresh.running
        assert len(app.store) == 1
        assert len(app.playlists) == 4

    assert not app.mounted
    assert not app.refresh.running


def test_playlist_load_failure_keeps_previous(app, station, playlists):
    app.load_playlists()
    station.fail_next("list_playlists")

    assert app.load_playlists() == playlists


def test_engines_share_the_store(app):
    app.store.reload()

    created = app.mutations.drop_playlist(3, day=0, minute=600)

    assert app.store.get(created.id) is not None
    assert app.expander.store is app.store
    assert app.autoscheduler.engine is app.mutations


def test_surprise_me(app, monkeypatch):
    monkeypatch.setattr(Config, "RESERVED_KEYWORDS", "")

    created = app.surprise_me(6, 18, 120)

    assert created == 7 * 6
    assert len(app.store) == created
