"""Turns calendar interactions into calls against the station service.

Moves and resizes are never conflict-checked: whoever drags a block is
overriding on purpose. A multi-day schedule is never edited in place to
change one day's time; that day is split out into its own record instead.

Nothing here rolls back the store after a failed call. The optimistic
local edit stays until the next reload brings the station's state back.
"""

import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .config import config
from .conflicts import Interval, find_conflict
from .exceptions import (
    ScheduleConflictError,
    ScheduleServiceError,
    SplitIncompleteError,
    ValidationError,
)
from .gestures import Outcome, OutcomeKind
from .models import ExplicitDays, Schedule, new_schedule, validate_interval
from .timemodel import DAYS, MINUTES_PER_DAY, clamp, format_time_12h, from_minutes, snap, validate_day

logger = logging.getLogger(__name__)

# Latest start for a dropped playlist so its default block fits the day
LATEST_DROP_START = 23 * 60


class SplitPhase(Enum):
    UPDATE_PENDING = "update-pending"
    CREATE_PENDING = "create-pending"
    DONE = "done"


@dataclass
class SplitTransaction:
    """Two-step split of one day out of a multi-day schedule.

    The original record is shortened first; the new single-day record is
    only created once that update has been accepted.
    """

    original: Schedule
    remaining_days: frozenset
    new_record: Schedule
    phase: SplitPhase = SplitPhase.UPDATE_PENDING
    created: Optional[Schedule] = None

    @property
    def schedule_id(self) -> Optional[int]:
        return self.original.id

    @property
    def done(self) -> bool:
        return self.phase is SplitPhase.DONE


@dataclass(frozen=True)
class Clipboard:
    """A copied slot, ready to paste onto another day."""

    playlist_id: int
    start_time: str
    end_time: str
    priority: int = 0


@dataclass
class DeleteResult:
    deleted: List[int] = field(default_factory=list)
    failed: Dict[int, ScheduleServiceError] = field(default_factory=dict)


class MutationEngine:
    """Applies create, move, resize, split and delete operations."""

    def __init__(self, client, store, refresh=None, default_block_minutes: int = None):
        self.client = client
        self.store = store
        self.refresh = refresh
        self.default_block_minutes = default_block_minutes or config.DEFAULT_BLOCK_MINUTES

    def after_commit(self, force: bool = False):
        """Refresh the local copy and tell the playback engine schedules changed."""
        try:
            self.store.reload()
        except ScheduleServiceError as e:
            logger.warning(f"Reload after change failed, calendar may be stale: {e}")
        self.client.notify_reload(force=force)

    # Gesture outcomes

    def commit(self, outcome: Optional[Outcome]) -> Union[Schedule, SplitTransaction, None]:
        """Commit a finished gesture.

        Returns the updated schedule for single-day records, or the
        :class:`SplitTransaction` when a multi-day record had to be split.
        """
        if outcome is None:
            return None

        if outcome.kind is OutcomeKind.CREATE:
            # Dragging on empty grid space only previews; playlists are added by dropping them
            logger.debug(f"Ignoring drag-create on {DAYS[outcome.day]} "
                         f"{from_minutes(outcome.start)}-{from_minutes(outcome.end)}")
            return None

        schedule = outcome.schedule
        if outcome.kind is OutcomeKind.MOVE:
            return self.move(schedule, outcome.origin_day, outcome.day, outcome.start)
        if outcome.kind is OutcomeKind.RESIZE_START:
            return self.resize_start(schedule, outcome.day, outcome.start)
        return self.resize_end(schedule, outcome.day, outcome.end)

    def move(self, schedule: Schedule, origin_day: int, target_day: int, start: int):
        """Move one day's block of ``schedule`` to ``start`` on ``target_day``."""
        end = start + schedule.duration
        return self._reschedule(schedule, origin_day, target_day, start, end)

    def resize_start(self, schedule: Schedule, day: int, start: int):
        return self._reschedule(schedule, day, day, start, schedule.end_minutes)

    def resize_end(self, schedule: Schedule, day: int, end: int):
        return self._reschedule(schedule, day, day, schedule.start_minutes, end)

    def _reschedule(self, schedule: Schedule, origin_day: int, target_day: int, start: int, end: int):
        validate_day(origin_day)
        validate_day(target_day)
        validate_interval(start, end)
        if schedule.id is None:
            raise ValidationError("Cannot change a schedule that has not been saved")

        if len(schedule.days) > 1:
            return self.split(schedule, origin_day, target_day, start, end)
        return self._update_single_day(schedule, origin_day, target_day, start, end)

    def _update_single_day(self, schedule: Schedule, origin_day: int, target_day: int,
                           start: int, end: int) -> Schedule:
        changes: Dict[str, Any] = {}
        if start != schedule.start_minutes:
            changes["start_time"] = from_minutes(start)
        if end != schedule.end_minutes:
            changes["end_time"] = from_minutes(end)
        if target_day != origin_day:
            changes["days_of_week"] = [target_day]
        if not changes:
            return schedule

        updated = schedule.copy(
            start_time=from_minutes(start),
            end_time=from_minutes(end),
            days=ExplicitDays([target_day]) if target_day != origin_day else schedule.days,
        )
        self.store.apply_local(updated)
        self.client.update_schedule(schedule.id, changes)
        self.after_commit()
        return updated

    # Split

    def split(self, schedule: Schedule, origin_day: int, target_day: int,
              start: int, end: int) -> SplitTransaction:
        """Give ``origin_day`` of a multi-day schedule its own record.

        The new record lands on ``target_day`` with the new time, the same
        playlist and priority, and the original's active flag.
        """
        validate_day(origin_day)
        validate_interval(start, end)
        if not schedule.is_active_on_day(origin_day):
            raise ValidationError(f"Schedule {schedule.id} does not run on {DAYS[origin_day]}")

        remaining = schedule.days.without(origin_day)
        new_record = new_schedule(
            playlist_id=schedule.playlist_id,
            days=ExplicitDays([target_day]),
            start_minutes=start,
            end_minutes=end,
            priority=schedule.priority,
            is_active=schedule.is_active,
            start_date=schedule.start_date,
            end_date=schedule.end_date,
        )
        txn = SplitTransaction(original=schedule, remaining_days=remaining, new_record=new_record)

        if not remaining:
            # Only one day after all: move the record itself
            txn.created = self._update_single_day(schedule, origin_day, target_day, start, end)
            txn.phase = SplitPhase.DONE
            return txn

        return self._run_split(txn)

    def retry_split(self, txn: SplitTransaction) -> SplitTransaction:
        """Resume a split from where it stopped; only unfinished steps are re-sent."""
        if txn.done:
            return txn
        return self._run_split(txn)

    def _run_split(self, txn: SplitTransaction) -> SplitTransaction:
        original = txn.original

        if txn.phase is SplitPhase.UPDATE_PENDING:
            shortened = original.copy(days=ExplicitDays(txn.remaining_days))
            self.store.apply_local(shortened)
            try:
                self.client.update_schedule(original.id, {"days_of_week": sorted(txn.remaining_days)})
            except ScheduleServiceError as e:
                logger.error(f"Split of schedule {original.id} failed before anything changed: {e}")
                raise SplitIncompleteError(
                    f"Schedule {original.id} could not be shortened: {e.message}",
                    txn,
                    status_code=e.status_code,
                ) from e
            txn.phase = SplitPhase.CREATE_PENDING

        if txn.phase is SplitPhase.CREATE_PENDING:
            try:
                txn.created = self.client.create_schedule(txn.new_record.to_payload())
            except ScheduleServiceError as e:
                logger.error(f"Split of schedule {original.id} left incomplete: {e}")
                raise SplitIncompleteError(
                    f"Schedule {original.id} was shortened but its new "
                    f"{DAYS[next(iter(txn.new_record.days))]} slot was not created: {e.message}",
                    txn,
                    status_code=e.status_code,
                ) from e
            self.store.apply_local(txn.created)
            txn.phase = SplitPhase.DONE

        logger.info(f"Split schedule {original.id}: kept days {sorted(txn.remaining_days)}, "
                    f"new schedule {txn.created.id} "
                    f"{format_time_12h(txn.created.start_time)}-{format_time_12h(txn.created.end_time)}")
        self.after_commit()
        return txn

    # Creation

    def drop_playlist(self, playlist_id: int, day: int, minute: float,
                      check_conflicts: bool = False) -> Schedule:
        """Create a default-length block where a playlist was dropped.

        No overlap check is made unless ``check_conflicts`` is set.
        """
        validate_day(day)
        start = clamp(snap(int(minute)), 0, LATEST_DROP_START)
        end = min(start + self.default_block_minutes, MINUTES_PER_DAY)
        candidate = new_schedule(playlist_id, ExplicitDays([day]), start, end)

        if check_conflicts:
            clash = find_conflict(self.store, Interval(day, start, end))
            if clash is not None:
                raise ScheduleConflictError(
                    f"Slot overlaps schedule {clash.id} ({clash.start_time}-{clash.end_time})",
                    operation="create",
                    schedule_id=clash.id,
                )
        return self._create(candidate)

    def copy(self, schedule: Schedule) -> Clipboard:
        return Clipboard(
            playlist_id=schedule.playlist_id,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            priority=schedule.priority,
        )

    def paste(self, clipboard: Clipboard, day: int) -> Schedule:
        """Create a single-day copy of the clipboard slot on ``day``."""
        validate_day(day)
        candidate = Schedule(
            playlist_id=clipboard.playlist_id,
            days=ExplicitDays([day]),
            start_time=clipboard.start_time,
            end_time=clipboard.end_time,
            priority=clipboard.priority,
        )
        validate_interval(candidate.start_minutes, candidate.end_minutes)
        return self._create(candidate)

    def _create(self, candidate: Schedule) -> Schedule:
        created = self.client.create_schedule(candidate.to_payload())
        self.store.apply_local(created)
        self.after_commit()
        return created

    # Enable / disable

    def toggle_today(self, schedule: Schedule, enable: bool, today: int) -> Dict[str, Any]:
        """Turn a schedule off (or back on) for ``today`` only.

        Disabling drops today from the day set, or deactivates the record when
        today is its only day. Enabling reactivates it, or adds today back.
        """
        validate_day(today)
        days = sorted(schedule.days.as_set())

        if not enable:
            remaining = [d for d in days if d != today]
            if remaining and len(remaining) < len(days):
                changes = {"days_of_week": remaining}
            else:
                changes = {"is_active": False}
        elif not schedule.is_active:
            changes = {"is_active": True}
        else:
            changes = {"days_of_week": sorted(set(days) | {today})}

        local = schedule.copy(
            is_active=changes.get("is_active", schedule.is_active),
            days=ExplicitDays(changes["days_of_week"]) if "days_of_week" in changes else schedule.days,
        )
        self.store.apply_local(local)
        self.client.update_schedule(schedule.id, changes)
        self.after_commit()
        return changes

    # Deletion

    def delete(self, schedule_id: int):
        self.store.discard_local(schedule_id)
        self.client.delete_schedule(schedule_id)
        self.after_commit()

    def delete_many(self, schedule_ids: List[int]) -> DeleteResult:
        """Delete several schedules; failures are collected, not raised."""
        result = DeleteResult()
        for schedule_id in schedule_ids:
            try:
                self.client.delete_schedule(schedule_id)
            except ScheduleServiceError as e:
                result.failed[schedule_id] = e
                continue
            self.store.discard_local(schedule_id)
            result.deleted.append(schedule_id)

        if result.failed:
            logger.warning(f"Deleted {len(result.deleted)} schedules, {len(result.failed)} failed")
        if result.deleted:
            self.after_commit()
        return result

    def clear_all(self):
        """Remove every schedule with one bulk call."""
        guard = self.refresh.bulk_operation() if self.refresh else nullcontext()
        with guard:
            self.client.bulk_replace([])
            self.store.replace([])
            logger.info("Cleared all schedules")
            self.after_commit(force=True)
