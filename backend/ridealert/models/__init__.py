from ridealert.models.day_schedule import DayScheduleRow
from ridealert.models.notified_ride import NotifiedRide
from ridealert.models.push_token import PushToken
from ridealert.models.ride_preference import RidePreferenceRow
from ridealert.models.schedule_archive import ScheduleArchive

__all__ = [
    "DayScheduleRow",
    "NotifiedRide",
    "PushToken",
    "RidePreferenceRow",
    "ScheduleArchive",
]
