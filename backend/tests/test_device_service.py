"""Push token registration: validation, moves between users and the locks held while moving."""
from contextlib import contextmanager

import pytest
from conftest import token_for

from ridealert.core.errors import ValidationError
from ridealert.core.locks import UserLocks
from ridealert.services import device_service


class TrackingLocks(UserLocks):
    """UserLocks that remembers which users are currently held."""

    def __init__(self):
        super().__init__()
        self.held = []

    @contextmanager
    def for_user(self, user_id):
        with super().for_user(user_id):
            self.held.append(user_id)
            try:
                yield
            finally:
                self.held.remove(user_id)


def test_rejects_invalid_token(store, locks, gateway):
    with pytest.raises(ValidationError):
        device_service.register_token(store, locks, gateway, "u1", "not-a-token")
    assert store.get_device_token("u1") is None


def test_register_is_idempotent_and_strips(store, locks, gateway):
    device_service.register_token(store, locks, gateway, "u1", f"  {token_for('u1')} ")
    device_service.register_token(store, locks, gateway, "u1", token_for("u1"))
    assert store.get_device_token("u1") == token_for("u1")


def test_moving_a_token_holds_both_users_locks(store, gateway, monkeypatch):
    locks = TrackingLocks()
    shared = token_for("phone")
    device_service.register_token(store, locks, gateway, "alice", shared)
    held_during_write = []
    original = store.put_device_token

    def recording_put(user_id, token):
        held_during_write.append(sorted(locks.held))
        original(user_id, token)

    monkeypatch.setattr(store, "put_device_token", recording_put)
    device_service.register_token(store, locks, gateway, "bob", shared)

    assert held_during_write == [["alice", "bob"]]
    assert store.get_device_token("alice") is None
    assert store.get_device_token("bob") == shared


def test_unregister(store, locks, gateway):
    device_service.register_token(store, locks, gateway, "u1", token_for("u1"))
    assert device_service.unregister_token(store, locks, "u1") is True
    assert device_service.unregister_token(store, locks, "u1") is False
