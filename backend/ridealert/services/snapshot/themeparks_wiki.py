"""ThemeParks.wiki client: live queue data plus the park's attraction list, normalized per ride."""
import logging
from datetime import datetime
from typing import Any

import httpx

from ridealert.core.clock import ParkClock
from ridealert.core.errors import UpstreamError
from ridealert.core.parks import Park, get_park, land_for
from ridealert.services.types import RideSnapshotEntry, RideStatus

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.themeparks.wiki/v1"

# Return-queue states that mean no return time will be shown
_RETURN_STATE_LABELS = {
    "FINISHED": "Unavailable",
    "TEMP_FULL": "Temporarily Full",
}


class ThemeParksWikiProvider:
    """SnapshotProvider over the public ThemeParks.wiki API."""

    def __init__(
        self,
        clock: ParkClock,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._clock = clock
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _get(self, client: httpx.Client, path: str) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            r = client.get(url)
        except httpx.HTTPError as e:
            raise UpstreamError(f"ThemeParks.wiki request failed: {e}") from e
        if not r.is_success:
            raise UpstreamError(f"ThemeParks.wiki error: {r.status_code} for {path}")
        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamError(f"ThemeParks.wiki returned non-JSON for {path}") from e
        if not isinstance(data, dict):
            raise UpstreamError(f"ThemeParks.wiki returned unexpected body for {path}")
        return data

    def get_snapshot(self, park_key: str) -> dict[str, RideSnapshotEntry]:
        park = get_park(park_key)
        if park is None:
            raise UpstreamError(f"Unknown park: {park_key}")
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            live = self._get(client, f"/entity/{park.entity_id}/live")
            children = self._get(client, f"/entity/{park.entity_id}/children")
        return self.organize(park, live, children)

    def organize(self, park: Park, live: dict[str, Any], children: dict[str, Any]) -> dict[str, RideSnapshotEntry]:
        """Attractions only, in the children listing order. Rides with no live row are CLOSED."""
        live_by_id = {
            row.get("id"): row for row in (live.get("liveData") or []) if isinstance(row, dict) and row.get("id")
        }
        out: dict[str, RideSnapshotEntry] = {}
        for entity in children.get("children") or []:
            if not isinstance(entity, dict) or entity.get("entityType") != "ATTRACTION":
                continue
            ride_id = entity.get("id")
            if not ride_id:
                continue
            name = entity.get("name") or ""
            row = live_by_id.get(ride_id)
            out[ride_id] = self._entry(park, ride_id, name, row)
        return out

    def _entry(self, park: Park, ride_id: str, name: str, row: dict[str, Any] | None) -> RideSnapshotEntry:
        if not row:
            return RideSnapshotEntry(
                ride_id=ride_id, name=name, status=RideStatus.CLOSED, park_key=park.key, land=land_for(park, name)
            )
        queue = row.get("queue") or {}
        standby = queue.get("STANDBY") or {}
        single_rider = queue.get("SINGLE_RIDER") or {}
        return_state, return_time = self._return_window(queue.get("RETURN_TIME"))
        paid_return_state, paid_return_time = self._return_window(queue.get("PAID_RETURN_TIME"))
        return RideSnapshotEntry(
            ride_id=ride_id,
            name=name,
            status=RideStatus.parse(row.get("status") or "CLOSED"),
            current_wait=_int_or(standby.get("waitTime"), 0),
            park_key=park.key,
            land=land_for(park, name),
            single_rider_wait=_int_or(single_rider.get("waitTime"), None),
            return_state=return_state,
            return_time=return_time,
            paid_return_state=paid_return_state,
            paid_return_time=paid_return_time,
        )

    def _return_window(self, queue: dict[str, Any] | None) -> tuple[str | None, str | None]:
        if not queue:
            return None, None
        state = queue.get("state")
        if state in _RETURN_STATE_LABELS:
            return state, _RETURN_STATE_LABELS[state]
        end = queue.get("returnEnd")
        if not end:
            return state, None
        try:
            return state, self._clock.format_time(datetime.fromisoformat(end))
        except ValueError:
            logger.debug("Unparseable returnEnd %r", end)
            return state, None


def _int_or(value: Any, default: int | None) -> int | None:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
