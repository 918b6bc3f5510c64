"""Archived days: read-only apart from deletion. Only the archival sweep creates them."""
from ridealert.core.clock import parse_date_key
from ridealert.core.errors import NotFoundError
from ridealert.core.locks import UserLocks
from ridealert.store.base import StateStore


def list_archives(store: StateStore, user_id: str) -> list[dict]:
    """Newest first, with item counts for a list view."""
    out = []
    for key in sorted(store.list_archive_dates(user_id), reverse=True):
        archive = store.get_archive(user_id, key)
        if archive is None:
            continue
        schedule = archive.schedule
        out.append(
            {
                "date": key,
                "archivedAt": archive.archived_at.isoformat(),
                "shows": len(schedule.shows),
                "dining": len(schedule.dining),
                "lightningLanes": len(schedule.lightning_lanes),
            }
        )
    return out


def get_archive(store: StateStore, user_id: str, date_key: str) -> dict:
    parse_date_key(date_key)
    archive = store.get_archive(user_id, date_key)
    if archive is None:
        raise NotFoundError(f"No archive for {date_key}")
    return archive.to_dict()


def delete_archive(store: StateStore, locks: UserLocks, user_id: str, date_key: str) -> None:
    parse_date_key(date_key)
    with locks.for_user(user_id):
        if not store.delete_archive(user_id, date_key):
            raise NotFoundError(f"No archive for {date_key}")
