"""SQLAlchemy-backed state store. One short session per call; commits before returning."""
import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy.orm import Session

from ridealert.models.day_schedule import DayScheduleRow
from ridealert.models.notified_ride import NotifiedRide
from ridealert.models.push_token import PushToken
from ridealert.models.ride_preference import RidePreferenceRow
from ridealert.models.schedule_archive import ScheduleArchive
from ridealert.services.types import Archive, DaySchedule, RidePreference

logger = logging.getLogger(__name__)


class SqlStateStore:
    """StateStore over the tables in ridealert.db.tables."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def list_user_ids(self) -> list[str]:
        with self._session() as db:
            ids: set[str] = set()
            for model in (RidePreferenceRow, NotifiedRide, DayScheduleRow, ScheduleArchive, PushToken):
                ids.update(uid for (uid,) in db.query(model.user_id).distinct().all())
        return sorted(ids)

    # --- ride preferences ---

    def get_preferences(self, user_id: str) -> dict[str, RidePreference]:
        with self._session() as db:
            rows = (
                db.query(RidePreferenceRow)
                .filter(RidePreferenceRow.user_id == user_id)
                .order_by(RidePreferenceRow.id.asc())
                .all()
            )
            return {r.ride_id: RidePreference(enabled=bool(r.enabled), max_wait=r.max_wait) for r in rows}

    def put_preferences(self, user_id: str, preferences: dict[str, RidePreference]) -> None:
        with self._session() as db:
            db.query(RidePreferenceRow).filter(RidePreferenceRow.user_id == user_id).delete(
                synchronize_session=False
            )
            for ride_id, pref in preferences.items():
                db.add(RidePreferenceRow(user_id=user_id, ride_id=ride_id, enabled=pref.enabled, max_wait=pref.max_wait))

    def put_preference(self, user_id: str, ride_id: str, preference: RidePreference) -> None:
        with self._session() as db:
            row = (
                db.query(RidePreferenceRow)
                .filter(RidePreferenceRow.user_id == user_id, RidePreferenceRow.ride_id == ride_id)
                .first()
            )
            if row is None:
                db.add(
                    RidePreferenceRow(
                        user_id=user_id, ride_id=ride_id, enabled=preference.enabled, max_wait=preference.max_wait
                    )
                )
            else:
                row.enabled = preference.enabled
                row.max_wait = preference.max_wait

    def delete_preference(self, user_id: str, ride_id: str) -> bool:
        with self._session() as db:
            deleted = (
                db.query(RidePreferenceRow)
                .filter(RidePreferenceRow.user_id == user_id, RidePreferenceRow.ride_id == ride_id)
                .delete(synchronize_session=False)
            )
        return deleted > 0

    # --- notified set ---

    def get_notified_rides(self, user_id: str) -> set[str]:
        with self._session() as db:
            return {rid for (rid,) in db.query(NotifiedRide.ride_id).filter(NotifiedRide.user_id == user_id).all()}

    def replace_notified_rides(self, user_id: str, ride_ids: set[str]) -> None:
        with self._session() as db:
            db.query(NotifiedRide).filter(NotifiedRide.user_id == user_id).delete(synchronize_session=False)
            for ride_id in sorted(ride_ids):
                db.add(NotifiedRide(user_id=user_id, ride_id=ride_id))

    # --- live schedules ---

    def list_schedule_dates(self, user_id: str) -> list[str]:
        with self._session() as db:
            rows = (
                db.query(DayScheduleRow.date_key)
                .filter(DayScheduleRow.user_id == user_id)
                .order_by(DayScheduleRow.date_key.asc())
                .all()
            )
            return [d for (d,) in rows]

    def get_schedule(self, user_id: str, date_key: str) -> DaySchedule:
        with self._session() as db:
            row = (
                db.query(DayScheduleRow)
                .filter(DayScheduleRow.user_id == user_id, DayScheduleRow.date_key == date_key)
                .first()
            )
            return DaySchedule.from_dict(row.payload if row else None)

    def put_schedule(self, user_id: str, date_key: str, schedule: DaySchedule) -> None:
        payload = schedule.to_dict()
        with self._session() as db:
            row = (
                db.query(DayScheduleRow)
                .filter(DayScheduleRow.user_id == user_id, DayScheduleRow.date_key == date_key)
                .first()
            )
            if row is None:
                db.add(DayScheduleRow(user_id=user_id, date_key=date_key, payload=payload))
            else:
                row.payload = payload

    def delete_schedule(self, user_id: str, date_key: str) -> bool:
        with self._session() as db:
            deleted = (
                db.query(DayScheduleRow)
                .filter(DayScheduleRow.user_id == user_id, DayScheduleRow.date_key == date_key)
                .delete(synchronize_session=False)
            )
        return deleted > 0

    # --- archives ---

    def list_archive_dates(self, user_id: str) -> list[str]:
        with self._session() as db:
            rows = (
                db.query(ScheduleArchive.date_key)
                .filter(ScheduleArchive.user_id == user_id)
                .order_by(ScheduleArchive.date_key.asc())
                .all()
            )
            return [d for (d,) in rows]

    def get_archive(self, user_id: str, date_key: str) -> Archive | None:
        with self._session() as db:
            row = (
                db.query(ScheduleArchive)
                .filter(ScheduleArchive.user_id == user_id, ScheduleArchive.date_key == date_key)
                .first()
            )
            return Archive.from_dict(row.payload) if row else None

    def put_archive(self, user_id: str, archive: Archive) -> None:
        payload = archive.to_dict()
        with self._session() as db:
            row = (
                db.query(ScheduleArchive)
                .filter(ScheduleArchive.user_id == user_id, ScheduleArchive.date_key == archive.date_key)
                .first()
            )
            if row is None:
                db.add(
                    ScheduleArchive(
                        user_id=user_id, date_key=archive.date_key, payload=payload, archived_at=archive.archived_at
                    )
                )
            else:
                row.payload = payload
                row.archived_at = archive.archived_at

    def delete_archive(self, user_id: str, date_key: str) -> bool:
        with self._session() as db:
            deleted = (
                db.query(ScheduleArchive)
                .filter(ScheduleArchive.user_id == user_id, ScheduleArchive.date_key == date_key)
                .delete(synchronize_session=False)
            )
        return deleted > 0

    # --- device registration ---

    def get_device_token(self, user_id: str) -> str | None:
        with self._session() as db:
            row = db.query(PushToken).filter(PushToken.user_id == user_id).first()
            return row.device_token if row else None

    def get_device_token_owner(self, token: str) -> str | None:
        with self._session() as db:
            row = db.query(PushToken).filter(PushToken.device_token == token).first()
            return row.user_id if row else None

    def put_device_token(self, user_id: str, token: str) -> None:
        with self._session() as db:
            # A device belongs to whoever registered it last
            db.query(PushToken).filter(PushToken.device_token == token, PushToken.user_id != user_id).delete(
                synchronize_session=False
            )
            row = db.query(PushToken).filter(PushToken.user_id == user_id).first()
            if row is None:
                db.add(PushToken(user_id=user_id, device_token=token))
            else:
                row.device_token = token
        logger.info("Registered push token for user %s", user_id)

    def delete_device_token(self, user_id: str, expected_token: str | None = None) -> bool:
        with self._session() as db:
            q = db.query(PushToken).filter(PushToken.user_id == user_id)
            if expected_token is not None:
                q = q.filter(PushToken.device_token == expected_token)
            deleted = q.delete(synchronize_session=False)
        return deleted > 0
