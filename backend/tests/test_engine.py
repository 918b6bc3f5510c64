"""Notification engine: one tick end to end over the memory store and fake gateway."""
from conftest import park_time, ride, token_for

from ridealert.services.types import DaySchedule, RidePreference, RideStatus, Show


def setup_user(deps, user_id="u1", max_wait=30):
    deps.store.put_device_token(user_id, token_for(user_id))
    deps.store.put_preference(user_id, "R1", RidePreference(enabled=True, max_wait=max_wait))


def test_ready_ride_announced_once(deps, provider, gateway):
    setup_user(deps)
    provider.set_rides("disneyland", ride("R1", 25))
    deps.cache.refresh_all()

    deps.engine.run_tick()
    deps.engine.run_tick()

    assert len(gateway.sent) == 1
    msg = gateway.sent[0]
    assert msg.user_id == "u1"
    assert msg.payload["rideIds"] == ["R1"]
    assert deps.store.get_notified_rides("u1") == {"R1"}


def test_ride_rearms_after_wait_goes_up(deps, provider, gateway):
    setup_user(deps)
    provider.set_rides("disneyland", ride("R1", 25))
    deps.cache.refresh_all()
    deps.engine.run_tick()

    provider.set_rides("disneyland", ride("R1", 60))
    deps.cache.refresh_all()
    deps.engine.run_tick()
    assert deps.store.get_notified_rides("u1") == set()

    provider.set_rides("disneyland", ride("R1", 10, RideStatus.DOWN))
    deps.cache.refresh_all()
    deps.engine.run_tick()
    assert len(gateway.sent) == 2


def test_notified_set_updates_without_token(deps, provider, gateway):
    deps.store.put_preference("u1", "R1", RidePreference(max_wait=30))
    provider.set_rides("disneyland", ride("R1", 5))
    deps.cache.refresh_all()

    deps.engine.run_tick()

    assert gateway.sent == []
    assert deps.store.get_notified_rides("u1") == {"R1"}


def test_no_snapshot_keeps_notified_set(deps, provider, gateway):
    setup_user(deps)
    deps.store.replace_notified_rides("u1", {"R1"})

    deps.engine.run_tick()

    assert deps.store.get_notified_rides("u1") == {"R1"}
    assert gateway.sent == []


def test_missing_park_keeps_its_rides_notified(deps, provider, gateway):
    setup_user(deps)
    deps.store.put_preference("u1", "D1", RidePreference(max_wait=30))
    deps.store.replace_notified_rides("u1", {"R1"})
    provider.failing.add("disneyland")
    provider.set_rides("californiaadventure", ride("D1", 5, park="californiaadventure"))
    deps.cache.refresh_all()

    deps.engine.run_tick()

    assert deps.store.get_notified_rides("u1") == {"R1", "D1"}
    assert [m.payload["rideIds"] for m in gateway.sent] == [["D1"]]


def test_show_reminders_for_today(deps, now, gateway):
    setup_user(deps)
    show = Show(id="s1", label="Fantasmic!", target_time=park_time(2025, 6, 14, 14, 0), travel_time_minutes=20)
    deps.store.put_schedule("u1", "2025-06-14", DaySchedule(shows=[show]))

    now.set(park_time(2025, 6, 14, 13, 39))
    deps.engine.run_tick()
    assert gateway.sent == []

    now.set(park_time(2025, 6, 14, 13, 40))
    deps.engine.run_tick()
    now.set(park_time(2025, 6, 14, 13, 41))
    deps.engine.run_tick()
    now.set(park_time(2025, 6, 14, 13, 56))
    deps.engine.run_tick()

    assert [m.category for m in gateway.sent] == ["show_reminder", "show_final_warning"]
    stored = deps.store.get_schedule("u1", "2025-06-14").shows[0]
    assert stored.notified and stored.final_warning_notified


def test_other_days_are_not_evaluated(deps, now, gateway):
    setup_user(deps)
    tomorrow = Show(id="s2", label="Parade", target_time=park_time(2025, 6, 15, 9, 0))
    deps.store.put_schedule("u1", "2025-06-15", DaySchedule(shows=[tomorrow]))
    now.set(park_time(2025, 6, 14, 23, 59))
    deps.engine.run_tick()
    assert gateway.sent == []


def test_one_bad_user_does_not_block_the_tick(deps, provider, gateway, monkeypatch):
    setup_user(deps, "bad")
    setup_user(deps, "good")
    provider.set_rides("disneyland", ride("R1", 5))
    deps.cache.refresh_all()
    original = deps.store.get_preferences

    def flaky(user_id):
        if user_id == "bad":
            raise RuntimeError("row lock timeout")
        return original(user_id)

    monkeypatch.setattr(deps.store, "get_preferences", flaky)
    report = deps.engine.run_tick()

    assert report.failed_users == ["bad"]
    assert [m.user_id for m in gateway.sent] == ["good"]


def test_malformed_stored_item_skips_only_that_item(deps, provider, gateway, store):
    setup_user(deps)
    provider.set_rides("disneyland", ride("R1", 10))
    deps.cache.refresh_all()
    due_now = Show(id="s1", label="Fantasmic!", target_time=park_time(2025, 6, 14, 10, 20), travel_time_minutes=20)
    # Raw payload as it could sit in storage: the first show has no targetTime
    store._schedules["u1"] = {"2025-06-14": {"shows": [{"id": "bad"}, due_now.to_dict()]}}

    report = deps.engine.run_tick()
    deps.engine.run_tick()

    assert report.failed_users == []
    assert sorted(m.category for m in gateway.sent) == ["ride_ready", "show_reminder"]
    assert deps.store.get_notified_rides("u1") == {"R1"}
    assert [s.id for s in deps.store.get_schedule("u1", "2025-06-14").shows] == ["s1"]


def test_reminder_failure_still_sends_ride_alert(deps, provider, gateway, monkeypatch):
    setup_user(deps)
    provider.set_rides("disneyland", ride("R1", 10))
    deps.cache.refresh_all()

    def broken_schedule(user_id, date_key):
        raise RuntimeError("schedule row unreadable")

    monkeypatch.setattr(deps.store, "get_schedule", broken_schedule)
    report = deps.engine.run_tick()

    assert report.failed_users == ["u1"]
    assert [m.payload["rideIds"] for m in gateway.sent] == [["R1"]]
    assert deps.store.get_notified_rides("u1") == {"R1"}


def test_ride_not_recorded_when_message_cannot_be_built(deps, provider, gateway, monkeypatch):
    import ridealert.services.engine as engine_module

    setup_user(deps)
    provider.set_rides("disneyland", ride("R1", 10))
    deps.cache.refresh_all()
    original = engine_module.ride_ready_message

    def broken_message(*args, **kwargs):
        raise ValueError("bad copy")

    monkeypatch.setattr(engine_module, "ride_ready_message", broken_message)
    deps.engine.run_tick()
    assert gateway.sent == []
    assert deps.store.get_notified_rides("u1") == set()

    monkeypatch.setattr(engine_module, "ride_ready_message", original)
    deps.engine.run_tick()
    assert [m.payload["rideIds"] for m in gateway.sent] == [["R1"]]
