#!/usr/bin/env python3
"""Test pointer gestures on the calendar grid."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from radio_calendar.gestures import GestureTracker, OutcomeKind
from radio_calendar.models import ExplicitDays, Schedule


def block(start="09:00", end="10:00", days=(1,)):
    return Schedule(id=1, playlist_id=2, start_time=start, end_time=end, days=ExplicitDays(days))


def test_move_keeps_duration_and_snaps():
    tracker = GestureTracker(step=15)
    sched = block("09:00", "10:00")
    # Grab 20 minutes into the block
    tracker.press_block(sched, 1, 560)
    tracker.drag(3, 860)

    outcome = tracker.release()

    assert outcome.kind is OutcomeKind.MOVE
    assert outcome.day == 3
    assert outcome.origin_day == 1
    assert (outcome.start, outcome.end) == (840, 900)
    assert outcome.schedule is sched


def test_move_clamped_to_end_of_day():
    tracker = GestureTracker(step=15)
    tracker.press_block(block("09:00", "11:00"), 1, 540)
    tracker.drag(1, 1430)

    outcome = tracker.release()

    assert (outcome.start, outcome.end) == (1320, 1440)


def test_move_clamped_to_start_of_day():
    tracker = GestureTracker(step=15)
    tracker.press_block(block("09:00", "10:00"), 1, 570)
    tracker.drag(1, 10)

    assert tracker.release().start == 0


def test_resize_start_keeps_minimum_length():
    tracker = GestureTracker(step=15)
    tracker.press_top_handle(block("09:00", "10:00"), 1)
    tracker.drag(1, 650)

    outcome = tracker.release()

    assert outcome.kind is OutcomeKind.RESIZE_START
    assert (outcome.start, outcome.end) == (585, 600)


def test_resize_end_extends_to_midnight():
    tracker = GestureTracker(step=15)
    tracker.press_bottom_handle(block("22:00", "23:00"), 1)
    tracker.drag(1, 1500)

    outcome = tracker.release()

    assert outcome.kind is OutcomeKind.RESIZE_END
    assert (outcome.start, outcome.end) == (1320, 1440)


def test_resize_stays_in_its_column():
    tracker = GestureTracker(step=15)
    tracker.press_bottom_handle(block(), 1)
    tracker.drag(5, 660)

    assert tracker.release().day == 1


def test_create_drag_upwards():
    tracker = GestureTracker(step=15)
    tracker.press_empty(4, 600)
    tracker.drag(4, 480)

    outcome = tracker.release()

    assert outcome.kind is OutcomeKind.CREATE
    assert (outcome.day, outcome.start, outcome.end) == (4, 480, 600)


def test_click_without_drag_does_nothing():
    tracker = GestureTracker(step=15)
    tracker.press_block(block(), 1, 550)
    assert tracker.release() is None
    assert not tracker.active


def test_second_press_is_ignored():
    tracker = GestureTracker(step=15)
    assert tracker.press_block(block(), 1, 550)
    assert not tracker.press_empty(2, 100)

    tracker.drag(2, 700)
    outcome = tracker.release()

    assert outcome.kind is OutcomeKind.MOVE


def test_drag_without_press_is_harmless():
    tracker = GestureTracker(step=15)
    tracker.drag(1, 100)
    assert tracker.release() is None
