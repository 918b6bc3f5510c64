"""Schedule mutations: creation rules, flag reset on timing edits, moves between days."""
from datetime import datetime

import pytest
from conftest import park_time

from ridealert.core.errors import ConflictError, NotFoundError, ValidationError
from ridealert.services import schedule_service
from ridealert.services.types import EventKind


@pytest.fixture
def create(store, locks, clock):
    def _create(kind=EventKind.SHOW, target=None, travel=10, item_id=None, label="Parade"):
        return schedule_service.create_item(
            store,
            locks,
            clock,
            "u1",
            kind,
            label=label,
            target_time=target or park_time(2025, 6, 14, 15, 0),
            travel_time_minutes=travel,
            item_id=item_id,
        )

    return _create


def test_create_files_item_under_its_park_date(create, store):
    key, item = create(target=park_time(2025, 6, 16, 20, 0))
    assert key == "2025-06-16"
    assert store.get_schedule("u1", "2025-06-16").find(EventKind.SHOW, item.id) is not None


def test_naive_target_time_is_park_local(create):
    key, item = create(target=datetime(2025, 6, 14, 23, 30))
    assert key == "2025-06-14"
    assert item.target_time.tzinfo is not None


def test_past_dates_are_rejected(create):
    with pytest.raises(ValidationError):
        create(target=park_time(2025, 6, 13, 20, 0))


def test_negative_travel_rejected(create):
    with pytest.raises(ValidationError):
        create(travel=-1)


def test_lightning_lane_needs_ride_id_and_is_unique_per_day(create):
    with pytest.raises(ValidationError):
        create(kind=EventKind.LIGHTNING_LANE)
    key, item = create(kind=EventKind.LIGHTNING_LANE, item_id="R9")
    assert item.id == "R9"
    with pytest.raises(ConflictError):
        create(kind=EventKind.LIGHTNING_LANE, item_id="R9")


class TestUpdate:
    def _fire(self, store, key):
        schedule = store.get_schedule("u1", key)
        for show in schedule.shows:
            show.notified = True
            show.final_warning_notified = True
        store.put_schedule("u1", key, schedule)

    def test_time_change_resets_both_flags(self, create, store, locks, clock):
        key, item = create()
        self._fire(store, key)
        _, updated = schedule_service.update_item(
            store, locks, clock, "u1", EventKind.SHOW, key, item.id, target_time=park_time(2025, 6, 14, 16, 0)
        )
        assert updated.notified is False
        assert updated.final_warning_notified is False
        stored = store.get_schedule("u1", key).shows[0]
        assert stored.notified is False and stored.target_time == park_time(2025, 6, 14, 16, 0)

    def test_travel_change_resets_flags(self, create, store, locks, clock):
        key, item = create()
        self._fire(store, key)
        _, updated = schedule_service.update_item(
            store, locks, clock, "u1", EventKind.SHOW, key, item.id, travel_time_minutes=30
        )
        assert updated.notified is False

    def test_label_only_change_keeps_flags(self, create, store, locks, clock):
        key, item = create()
        self._fire(store, key)
        _, updated = schedule_service.update_item(
            store, locks, clock, "u1", EventKind.SHOW, key, item.id, label="Night Parade"
        )
        assert updated.notified is True
        assert updated.label == "Night Parade"

    def test_same_time_keeps_flags(self, create, store, locks, clock):
        key, item = create()
        self._fire(store, key)
        _, updated = schedule_service.update_item(
            store, locks, clock, "u1", EventKind.SHOW, key, item.id, target_time=park_time(2025, 6, 14, 15, 0)
        )
        assert updated.notified is True

    def test_moving_to_another_day_moves_the_item(self, create, store, locks, clock):
        key, item = create()
        new_key, _ = schedule_service.update_item(
            store, locks, clock, "u1", EventKind.SHOW, key, item.id, target_time=park_time(2025, 6, 15, 15, 0)
        )
        assert new_key == "2025-06-15"
        assert store.list_schedule_dates("u1") == ["2025-06-15"]

    def test_missing_item(self, store, locks, clock):
        with pytest.raises(NotFoundError):
            schedule_service.update_item(store, locks, clock, "u1", EventKind.DINING, "2025-06-14", "nope", label="x")


def test_delete_removes_empty_day(create, store, locks):
    key, item = create(kind=EventKind.DINING)
    schedule_service.delete_item(store, locks, "u1", EventKind.DINING, key, item.id)
    assert store.list_schedule_dates("u1") == []
    with pytest.raises(NotFoundError):
        schedule_service.delete_item(store, locks, "u1", EventKind.DINING, key, item.id)


def test_bad_date_key(store):
    with pytest.raises(ValidationError):
        schedule_service.get_schedule(store, "u1", "tomorrow")
