"""Client for the station service's schedule API."""

import logging
from typing import Any, Dict, List, Optional

import requests

from .config import config
from .exceptions import ScheduleConflictError, ScheduleNotFoundError, ScheduleServiceError
from .models import Playlist, Schedule

logger = logging.getLogger(__name__)

class StationClient:
    """Talks JSON to the station service. The station is the only source of truth."""

    def __init__(self, base_url: str = None, token: str = None, timeout: float = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or config.STATION_API_URL).rstrip("/")
        self.token = token if token is not None else config.STATION_API_TOKEN
        self.timeout = timeout or config.HTTP_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if self.token:
            self.session.headers["Authorization"] = f"Bearer {self.token}"

    def _request(self, method: str, path: str, operation: str,
                 schedule_id: Optional[int] = None, body: Any = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"{operation} request to {url} failed: {e}")
            raise ScheduleServiceError(str(e), operation=operation, schedule_id=schedule_id) from e

        if not response.ok:
            message = self._error_message(response)
            logger.error(f"{operation} returned HTTP {response.status_code}: {message}")
            if response.status_code == 404:
                error_class = ScheduleNotFoundError
            elif response.status_code == 409:
                error_class = ScheduleConflictError
            else:
                error_class = ScheduleServiceError
            raise error_class(message, operation=operation, schedule_id=schedule_id,
                              status_code=response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ScheduleServiceError(
                f"Invalid JSON from station (HTTP {response.status_code})",
                operation=operation, schedule_id=schedule_id, status_code=response.status_code,
            ) from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return f"Server error (HTTP {response.status_code})"

    # Schedules

    def list_schedules(self) -> List[Schedule]:
        """Get all schedules from the station."""
        data = self._request("GET", "/admin/schedules", "list schedules")
        schedules = [Schedule.from_api(item) for item in data.get("schedules") or []]
        logger.debug(f"Fetched {len(schedules)} schedules")
        return schedules

    def create_schedule(self, payload: Dict[str, Any]) -> Schedule:
        """Create a schedule; the station assigns the id."""
        data = self._request("POST", "/admin/schedules", "create schedule", body=payload)
        created = Schedule.from_api({**payload, "id": data.get("id")})
        logger.info(f"Created schedule {created.id}: playlist {created.playlist_id} "
                    f"{created.start_time}-{created.end_time} days={payload.get('days_of_week')}")
        return created

    def update_schedule(self, schedule_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Update some fields of a schedule."""
        data = self._request("PUT", f"/admin/schedules/{schedule_id}", "update",
                             schedule_id=schedule_id, body=changes)
        logger.info(f"Updated schedule {schedule_id}: {changes}")
        return data

    def delete_schedule(self, schedule_id: int):
        """Delete a schedule."""
        self._request("DELETE", f"/admin/schedules/{schedule_id}", "delete",
                      schedule_id=schedule_id)
        logger.info(f"Deleted schedule {schedule_id}")

    def bulk_replace(self, payloads: List[Dict[str, Any]]) -> int:
        """Clear every existing schedule and insert ``payloads`` in one call."""
        data = self._request("POST", "/admin/schedules/bulk", "bulk replace",
                             body={"clear_existing": True, "schedules": payloads})
        created = int(data.get("created", 0))
        logger.info(f"Bulk replace created {created} schedules")
        return created

    def notify_reload(self, force: bool = False):
        """Ask the playback engine to re-check what should be on air. Failures are ignored."""
        try:
            self._request("POST", "/admin/schedules/reload", "notify reload", body={"force": force})
        except ScheduleServiceError as e:
            logger.warning(f"Playback engine reload notification failed: {e}")

    # Read-only station data

    def list_playlists(self) -> List[Playlist]:
        """Get playlists that can be scheduled (emergency playlists excluded)."""
        data = self._request("GET", "/admin/playlists", "list playlists")
        return [Playlist.from_api(item) for item in data.get("playlists") or []
                if item.get("type") != "emergency"]

    def get_station_timezone(self) -> str:
        """Station timezone name, falling back to the configured one."""
        try:
            data = self._request("GET", "/config", "station config")
        except ScheduleServiceError as e:
            logger.warning(f"Could not read station timezone, using {config.STATION_TIMEZONE}: {e}")
            return config.STATION_TIMEZONE
        return data.get("station_timezone") or config.STATION_TIMEZONE

    def get_settings(self) -> Dict[str, str]:
        """Station settings as a key/value dict."""
        data = self._request("GET", "/admin/settings", "list settings")
        return {item["key"]: item.get("value") for item in data.get("settings") or [] if "key" in item}
