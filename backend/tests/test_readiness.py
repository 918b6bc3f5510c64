"""Ride readiness: thresholds, statuses, idempotence and re-arm."""
from conftest import ride

from ridealert.services.readiness import evaluate_readiness
from ridealert.services.types import RidePreference, RideStatus


def snapshot(*entries):
    return {e.ride_id: e for e in entries}


class TestEvaluateReadiness:
    def test_ride_under_threshold_is_newly_ready(self):
        prefs = {"R1": RidePreference(enabled=True, max_wait=30)}
        result = evaluate_readiness(prefs, snapshot(ride("R1", 25)), set())
        assert result.newly_ready == ["R1"]
        assert result.currently_ready == {"R1"}

    def test_wait_equal_to_threshold_counts(self):
        prefs = {"R1": RidePreference(max_wait=30)}
        assert evaluate_readiness(prefs, snapshot(ride("R1", 30)), set()).newly_ready == ["R1"]

    def test_over_threshold_disabled_or_closed_is_not_ready(self):
        prefs = {
            "R1": RidePreference(max_wait=30),
            "R2": RidePreference(enabled=False, max_wait=60),
            "R3": RidePreference(max_wait=60),
            "R4": RidePreference(max_wait=60),
        }
        snap = snapshot(
            ride("R1", 45),
            ride("R2", 5),
            ride("R3", 0, RideStatus.CLOSED),
            ride("R4", 0, RideStatus.REFURBISHMENT),
        )
        result = evaluate_readiness(prefs, snap, set())
        assert result.newly_ready == []
        assert result.currently_ready == frozenset()

    def test_down_counts_as_ready(self):
        prefs = {"R1": RidePreference(max_wait=10)}
        assert evaluate_readiness(prefs, snapshot(ride("R1", 0, RideStatus.DOWN)), set()).newly_ready == ["R1"]

    def test_same_snapshot_twice_announces_once(self):
        prefs = {"R1": RidePreference(max_wait=30)}
        snap = snapshot(ride("R1", 25))
        first = evaluate_readiness(prefs, snap, set())
        second = evaluate_readiness(prefs, snap, set(first.currently_ready))
        assert first.newly_ready == ["R1"]
        assert second.newly_ready == []
        assert second.currently_ready == {"R1"}

    def test_rearms_after_dropping_out(self):
        prefs = {"R1": RidePreference(max_wait=30)}
        notified = set(evaluate_readiness(prefs, snapshot(ride("R1", 25)), set()).currently_ready)
        notified = set(evaluate_readiness(prefs, snapshot(ride("R1", 50)), notified).currently_ready)
        assert notified == set()
        again = evaluate_readiness(prefs, snapshot(ride("R1", 20)), notified)
        assert again.newly_ready == ["R1"]

    def test_preference_without_snapshot_entry_is_not_ready(self):
        prefs = {"GHOST": RidePreference(max_wait=30)}
        result = evaluate_readiness(prefs, snapshot(ride("R1", 5)), {"GHOST"})
        assert result.newly_ready == []
        assert result.currently_ready == frozenset()

    def test_newly_ready_follows_snapshot_order(self):
        prefs = {rid: RidePreference(max_wait=30) for rid in ("A", "B", "C")}
        snap = snapshot(ride("C", 5), ride("A", 5), ride("B", 5))
        assert evaluate_readiness(prefs, snap, {"A"}).newly_ready == ["C", "B"]

    def test_malformed_preferences_are_skipped(self):
        prefs = {
            "R1": {"enabled": True, "maxWait": "soon"},
            "R2": "not a preference",
            "R3": {"enabled": True},
            "R4": {"enabled": True, "maxWait": 40},
        }
        snap = snapshot(ride("R1", 5), ride("R2", 5), ride("R3", 5), ride("R4", 5))
        result = evaluate_readiness(prefs, snap, set())
        assert result.newly_ready == ["R4"]
