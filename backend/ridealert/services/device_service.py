"""Push token registration: at most one device per user, one user per device."""
import logging

from ridealert.core.errors import ValidationError
from ridealert.core.locks import UserLocks
from ridealert.services.push.base import DeliveryGateway
from ridealert.store.base import StateStore

logger = logging.getLogger(__name__)


def register_token(store: StateStore, locks: UserLocks, gateway: DeliveryGateway, user_id: str, token: str) -> None:
    """
    Idempotent upsert. A token that moves to another user (reinstall, shared device) is
    taken away from the previous owner by the store, with the previous owner's lock held too.
    """
    token = (token or "").strip()
    if not gateway.is_valid_address(token):
        raise ValidationError("Not a valid push token for the configured provider")
    while True:
        owner = store.get_device_token_owner(token)
        with locks.for_users(user_id, *([owner] if owner else [])):
            # Owner may have changed before both locks were held
            if store.get_device_token_owner(token) != owner:
                continue
            store.put_device_token(user_id, token)
        if owner and owner != user_id:
            logger.info("Push token moved from user %s to user %s", owner, user_id)
        return


def unregister_token(store: StateStore, locks: UserLocks, user_id: str) -> bool:
    with locks.for_user(user_id):
        removed = store.delete_device_token(user_id)
    if removed:
        logger.info("Unregistered push token for user %s", user_id)
    return removed
