"""Pointer gestures on the weekly calendar.

A gesture starts with a press (on a block body, one of its resize handles,
or empty grid space), follows the pointer with ``drag`` and resolves on
``release`` into an :class:`Outcome`. Positions are given in calendar
terms: a day column and a minute of day. Every computed boundary is snapped
to the grid step. Only one gesture can be in progress at a time.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import config
from .models import Schedule
from .timemodel import MINUTES_PER_DAY, clamp, snap, validate_day

logger = logging.getLogger(__name__)


class OutcomeKind(Enum):
    MOVE = "move"
    RESIZE_START = "resize-start"
    RESIZE_END = "resize-end"
    CREATE = "create"


@dataclass(frozen=True)
class Outcome:
    """Result of a finished gesture."""

    kind: OutcomeKind
    day: int
    start: int
    end: int
    origin_day: int
    schedule: Optional[Schedule] = None


@dataclass
class _Gesture:
    kind: OutcomeKind
    day: int
    origin_day: int
    schedule: Optional[Schedule] = None
    start: Optional[int] = None
    end: Optional[int] = None
    duration: int = 0
    grab_offset: int = 0
    anchor: int = 0
    moved: bool = False


class GestureTracker:
    """Tracks the single in-progress drag, resize or create gesture."""

    def __init__(self, step: int = None):
        self.step = step or config.SNAP_MINUTES
        self._active: Optional[_Gesture] = None

    @property
    def active(self) -> bool:
        return self._active is not None

    def _snap(self, minute: float) -> int:
        return snap(int(minute), self.step)

    def _begin(self, gesture: _Gesture) -> bool:
        if self._active is not None:
            logger.debug(f"Ignoring {gesture.kind.value} press while a {self._active.kind.value} gesture is active")
            return False
        validate_day(gesture.day)
        self._active = gesture
        return True

    def press_block(self, schedule: Schedule, day: int, minute: float) -> bool:
        """Start moving a block; ``minute`` is where the pointer grabbed it."""
        return self._begin(_Gesture(
            kind=OutcomeKind.MOVE,
            day=day,
            origin_day=day,
            schedule=schedule,
            start=schedule.start_minutes,
            duration=schedule.duration,
            grab_offset=int(minute) - schedule.start_minutes,
        ))

    def press_top_handle(self, schedule: Schedule, day: int) -> bool:
        return self._begin(_Gesture(
            kind=OutcomeKind.RESIZE_START,
            day=day,
            origin_day=day,
            schedule=schedule,
            end=schedule.end_minutes,
        ))

    def press_bottom_handle(self, schedule: Schedule, day: int) -> bool:
        return self._begin(_Gesture(
            kind=OutcomeKind.RESIZE_END,
            day=day,
            origin_day=day,
            schedule=schedule,
            start=schedule.start_minutes,
        ))

    def press_empty(self, day: int, minute: float) -> bool:
        anchor = clamp(self._snap(minute), 0, MINUTES_PER_DAY - self.step)
        return self._begin(_Gesture(
            kind=OutcomeKind.CREATE,
            day=day,
            origin_day=day,
            anchor=anchor,
            start=anchor,
            end=anchor,
        ))

    def drag(self, day: int, minute: float):
        """Follow the pointer. Resize and create gestures stay in their own column."""
        g = self._active
        if g is None:
            return

        if g.kind is OutcomeKind.MOVE:
            g.day = validate_day(day)
            g.start = clamp(self._snap(minute - g.grab_offset), 0, MINUTES_PER_DAY - g.duration)
            g.moved = True
        elif g.kind is OutcomeKind.RESIZE_START:
            g.start = clamp(self._snap(minute), 0, g.end - self.step)
            g.moved = True
        elif g.kind is OutcomeKind.RESIZE_END:
            g.end = clamp(self._snap(minute), g.start + self.step, MINUTES_PER_DAY)
            g.moved = True
        else:
            current = clamp(self._snap(minute), 0, MINUTES_PER_DAY)
            g.start = min(g.anchor, current)
            g.end = max(g.anchor, current)
            if g.end - g.start < self.step:
                g.end = g.start + self.step
            g.moved = current != g.anchor

    def release(self) -> Optional[Outcome]:
        """Finish the gesture at its last computed position.

        Returns ``None`` when nothing changed (a plain click).
        """
        g = self._active
        self._active = None
        if g is None or not g.moved:
            return None

        if g.kind is OutcomeKind.MOVE:
            start, end = g.start, g.start + g.duration
        else:
            start, end = g.start, g.end

        return Outcome(
            kind=g.kind,
            day=g.day,
            start=start,
            end=end,
            origin_day=g.origin_day,
            schedule=g.schedule,
        )
