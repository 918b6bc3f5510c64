"""ThemeParks.wiki normalization and the last-known-good cache."""
import httpx
import pytest
from conftest import FakeProvider, ride

from ridealert.core.clock import ParkClock
from ridealert.core.errors import UpstreamError
from ridealert.core.parks import PARKS
from ridealert.services.snapshot import SnapshotCache, ThemeParksWikiProvider
from ridealert.services.types import RideStatus

DL = PARKS["disneyland"]

CHILDREN = {
    "children": [
        {"id": "a1", "name": "Space Mountain", "entityType": "ATTRACTION"},
        {"id": "a2", "name": "Pirates of the Caribbean", "entityType": "ATTRACTION"},
        {"id": "a3", "name": "Matterhorn Bobsleds", "entityType": "ATTRACTION"},
        {"id": "x1", "name": "Fantasmic!", "entityType": "SHOW"},
        {"id": "x2", "name": "Plaza Inn", "entityType": "RESTAURANT"},
    ]
}

LIVE = {
    "liveData": [
        {
            "id": "a1",
            "status": "OPERATING",
            "queue": {
                "STANDBY": {"waitTime": 45},
                "SINGLE_RIDER": {"waitTime": 10},
                "RETURN_TIME": {"state": "AVAILABLE", "returnEnd": "2025-06-14T14:35:00-07:00"},
                "PAID_RETURN_TIME": {"state": "AVAILABLE", "returnEnd": "2025-06-14T11:05:00-07:00"},
            },
        },
        {
            "id": "a2",
            "status": "DOWN",
            "queue": {
                "STANDBY": {"waitTime": None},
                "RETURN_TIME": {"state": "FINISHED"},
                "PAID_RETURN_TIME": {"state": "TEMP_FULL"},
            },
        },
        {"id": "x1", "status": "OPERATING"},
    ]
}


@pytest.fixture
def wiki():
    return ThemeParksWikiProvider(ParkClock("America/Los_Angeles"))


class TestOrganize:
    def test_attractions_only_in_listing_order(self, wiki):
        entries = wiki.organize(DL, LIVE, CHILDREN)
        assert list(entries) == ["a1", "a2", "a3"]

    def test_operating_ride_fields(self, wiki):
        e = wiki.organize(DL, LIVE, CHILDREN)["a1"]
        assert e.status is RideStatus.OPERATING
        assert e.current_wait == 45
        assert e.single_rider_wait == 10
        assert e.return_state == "AVAILABLE"
        assert e.return_time == "2:35 PM"
        assert e.paid_return_state == "AVAILABLE"
        assert e.paid_return_time == "11:05 AM"
        assert e.park_key == "disneyland"

    def test_down_ride_with_no_wait(self, wiki):
        e = wiki.organize(DL, LIVE, CHILDREN)["a2"]
        assert e.status is RideStatus.DOWN
        assert e.current_wait == 0
        assert e.return_time == "Unavailable"
        assert e.paid_return_state == "TEMP_FULL"
        assert e.paid_return_time == "Temporarily Full"

    def test_ride_without_live_row_is_closed(self, wiki):
        e = wiki.organize(DL, LIVE, CHILDREN)["a3"]
        assert e.status is RideStatus.CLOSED

    def test_unknown_status_maps_to_unknown(self, wiki):
        live = {"liveData": [{"id": "a1", "status": "SOMETHING_NEW"}]}
        assert wiki.organize(DL, live, CHILDREN)["a1"].status is RideStatus.UNKNOWN


def _transport(handler):
    return httpx.MockTransport(handler)


def test_get_snapshot_calls_live_and_children():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        if request.url.path.endswith("/live"):
            return httpx.Response(200, json=LIVE)
        return httpx.Response(200, json=CHILDREN)

    wiki = ThemeParksWikiProvider(ParkClock("America/Los_Angeles"), base_url="https://wiki.test/v1", transport=_transport(handler))
    entries = wiki.get_snapshot("disneyland")
    assert seen == [f"/v1/entity/{DL.entity_id}/live", f"/v1/entity/{DL.entity_id}/children"]
    assert entries["a1"].current_wait == 45


def test_upstream_error_status_raises():
    wiki = ThemeParksWikiProvider(
        ParkClock("America/Los_Angeles"), transport=_transport(lambda r: httpx.Response(503, text="busy"))
    )
    with pytest.raises(UpstreamError):
        wiki.get_snapshot("disneyland")


def test_unknown_park_raises(wiki):
    with pytest.raises(UpstreamError):
        wiki.get_snapshot("epcot")


class TestSnapshotCache:
    def test_failed_refresh_keeps_last_good(self, clock):
        provider = FakeProvider()
        provider.set_rides("disneyland", ride("R1", 20))
        cache = SnapshotCache(provider, clock, ["disneyland", "californiaadventure"])
        assert cache.refresh_all() == {"disneyland": True, "californiaadventure": True}

        provider.failing.add("disneyland")
        provider.set_rides("disneyland", ride("R1", 90))
        assert cache.refresh_park("disneyland") is False
        assert cache.park("disneyland")["R1"].current_wait == 20

    def test_never_loaded_park_is_missing(self, clock):
        provider = FakeProvider()
        provider.failing.add("californiaadventure")
        provider.set_rides("disneyland", ride("R1", 20))
        cache = SnapshotCache(provider, clock, ["disneyland", "californiaadventure"])
        cache.refresh_all()
        combined = cache.combined()
        assert combined.missing_parks == ("californiaadventure",)
        assert not combined.complete
        assert list(combined.entries) == ["R1"]
        assert cache.last_updated("californiaadventure") is None
        assert cache.last_updated("disneyland") == clock.now()
