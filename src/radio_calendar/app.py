"""Single entry point that wires the calendar together for the admin UI."""

import logging
import random
from typing import List, Optional

from .autoscheduler import AutoScheduler
from .client import StationClient
from .config import config, setup_logging
from .exceptions import ScheduleServiceError
from .expander import PatternExpander
from .gestures import GestureTracker
from .models import Playlist
from .mutations import MutationEngine
from .refresh import RefreshLoop
from .store import ScheduleStore
from .timemodel import StationClock

logger = logging.getLogger(__name__)

class CalendarApp:
    """Weekly schedule calendar: store, background refresh and the editing engines."""

    def __init__(self, client: Optional[StationClient] = None, rng: Optional[random.Random] = None):
        self.client = client or StationClient()
        self.clock = StationClock()
        self.store = ScheduleStore(self.client)
        self.refresh = RefreshLoop(self.store)
        self.mutations = MutationEngine(self.client, self.store, self.refresh)
        self.expander = PatternExpander(self.mutations)
        self.autoscheduler = AutoScheduler(self.mutations, rng=rng)
        self.gestures = GestureTracker()
        self.playlists: List[Playlist] = []
        self.mounted = False

    def setup(self, configure_logging: bool = True):
        """Setup the application (logging and station timezone)."""
        if configure_logging:
            setup_logging()
        logger.info("Starting Radio Calendar")
        logger.info(f"Station service: {self.client.base_url}")

        self.clock.set_timezone(self.client.get_station_timezone())
        logger.info(f"Station timezone: {self.clock.timezone_name}")

    def load_playlists(self) -> List[Playlist]:
        """Refresh the playlist palette used for drops and auto-scheduling."""
        try:
            self.playlists = self.client.list_playlists()
        except ScheduleServiceError as e:
            logger.error(f"Could not load playlists: {e}")
            return self.playlists
        logger.info(f"Loaded {len(self.playlists)} playlists")
        return self.playlists

    def mount(self):
        """Load everything and start the background refresh."""
        if self.mounted:
            return
        self.store.reload()
        self.load_playlists()
        self.refresh.start()
        self.mounted = True
        logger.info(f"Calendar mounted with {len(self.store)} schedules")

    def teardown(self):
        """Stop the background refresh."""
        if not self.mounted:
            return
        logger.info("Tearing down calendar")
        self.refresh.stop()
        self.mounted = False

    def live_now(self):
        return self.store.live_now(self.clock)

    def today(self) -> int:
        return self.clock.today()

    def surprise_me(self, start_hour: int = 0, end_hour: int = 24, block_minutes: int = None) -> int:
        """Replace the whole week with a generated schedule."""
        playlists = self.playlists or self.load_playlists()
        return self.autoscheduler.run(
            start_hour, end_hour, block_minutes or config.DEFAULT_BLOCK_MINUTES, playlists=playlists
        )

    def __enter__(self):
        self.mount()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.teardown()
        return False
