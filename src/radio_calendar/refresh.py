"""Periodic background reload of the schedule store."""

import logging
import threading
from contextlib import contextmanager

import schedule

from .config import config

logger = logging.getLogger(__name__)

class RefreshLoop:
    """Reloads the store on a fixed interval.

    Started when the calendar mounts and stopped when it is torn down.
    Bulk operations pause it so a reload cannot land mid-replacement.
    """

    def __init__(self, store, interval: int = None, poll_seconds: float = 1.0):
        self.store = store
        self.interval = interval or config.REFRESH_INTERVAL
        self.poll_seconds = poll_seconds
        self.jobs = schedule.Scheduler()
        self._paused = False
        self._stop_event = threading.Event()
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def paused(self) -> bool:
        return self._paused

    def start(self):
        """Start the refresh thread."""
        if self.running:
            return
        self.jobs.clear()
        self.jobs.every(self.interval).seconds.do(self.tick)
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        logger.info(f"Schedule refresh started (every {self.interval}s)")

    def stop(self):
        """Stop the refresh thread."""
        if not self.running:
            return
        self._stop_event.set()
        self._thread.join(timeout=self.poll_seconds * 5)
        self._thread = None
        self.jobs.clear()
        logger.info("Schedule refresh stopped")

    def pause(self):
        self._paused = True
        logger.debug("Schedule refresh paused")

    def resume(self):
        self._paused = False
        logger.debug("Schedule refresh resumed")

    @contextmanager
    def bulk_operation(self):
        """Pause refreshes for the duration of a bulk change."""
        self.pause()
        try:
            yield
        finally:
            self.resume()

    def tick(self) -> bool:
        """Reload once unless paused. Returns True if a reload happened."""
        if self._paused:
            logger.debug("Skipping schedule refresh during bulk operation")
            return False
        try:
            self.store.reload()
        except Exception as e:
            logger.error(f"Schedule refresh error: {e}")
            return False
        return True

    def _run(self):
        logger.info("Schedule refresh worker running")
        while not self._stop_event.is_set():
            self.jobs.run_pending()
            self._stop_event.wait(self.poll_seconds)
        logger.info("Schedule refresh worker stopped")
