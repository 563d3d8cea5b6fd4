#!/usr/bin/env python3
"""Test time-of-day conversion and snapping."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from radio_calendar.exceptions import ValidationError
from radio_calendar.timemodel import (
    MINUTES_PER_DAY,
    clamp,
    format_time_12h,
    from_minutes,
    snap,
    to_minutes,
    validate_day,
)


def test_round_trip_every_quarter_hour():
    for minute in range(0, MINUTES_PER_DAY + 1, 15):
        assert to_minutes(from_minutes(minute)) == minute


def test_end_of_day_renders_as_24():
    assert from_minutes(1440) == "24:00"
    assert to_minutes("24:00") == 1440


def test_service_seconds_are_ignored():
    assert to_minutes("09:30:00") == 570
    assert to_minutes("9:05") == 545


@pytest.mark.parametrize("value", ["", "abc", "12:60", "25:00", "24:15", "-1:00"])
def test_bad_times_rejected(value):
    with pytest.raises(ValidationError):
        to_minutes(value)


def test_from_minutes_out_of_range():
    with pytest.raises(ValidationError):
        from_minutes(-1)
    with pytest.raises(ValidationError):
        from_minutes(1441)


def test_snap_rounds_to_nearest_quarter():
    assert snap(0) == 0
    assert snap(7) == 0
    assert snap(8) == 15
    assert snap(22) == 15
    assert snap(23) == 30
    assert snap(1439) == 1440


def test_snap_is_idempotent():
    for minute in range(0, MINUTES_PER_DAY + 1):
        once = snap(minute)
        assert snap(once) == once


def test_snap_custom_step():
    assert snap(44, 30) == 30
    assert snap(45, 30) == 60


def test_clamp():
    assert clamp(-5, 0, 10) == 0
    assert clamp(15, 0, 10) == 10
    assert clamp(5, 0, 10) == 5


def test_format_time_12h():
    assert format_time_12h("00:00") == "12:00 AM"
    assert format_time_12h("12:30") == "12:30 PM"
    assert format_time_12h("14:05") == "2:05 PM"
    assert format_time_12h("24:00") == "12:00 AM"


@pytest.mark.parametrize("day", [-1, 7, True, "1", 1.0])
def test_validate_day_rejects(day):
    with pytest.raises(ValidationError):
        validate_day(day)


def test_validate_day_accepts_week():
    assert [validate_day(d) for d in range(7)] == list(range(7))
