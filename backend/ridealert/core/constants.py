"""
Centralized constants for scheduler, reminders and push delivery.

Change job IDs or fixed offsets here instead of scattering literals across main and services.
Deployment-tunable values (intervals, batch size, timeouts) come from config.Settings.
"""

# Scheduler job IDs (must match ids used in main.py add_job)
RIDE_ALERT_TICK_JOB_ID = "ride_alert_tick"
SNAPSHOT_REFRESH_JOB_ID = "snapshot_refresh"
SCHEDULE_ARCHIVAL_JOB_ID = "schedule_archival"

# Shows get a second "starting soon" push this many minutes before curtain. Not user-configurable.
FINAL_WARNING_MINUTES = 5

# Ride statuses that count as "worth lining up now". DOWN is included on purpose:
# a broken-down ride often clears its queue.
READY_STATUSES = frozenset({"OPERATING", "DOWN"})

# Expo push API accepts at most 100 messages per request
EXPO_MAX_BATCH_SIZE = 100

# Notification categories (also used as payload "type")
CATEGORY_RIDE_READY = "ride_ready"
CATEGORY_SHOW_REMINDER = "show_reminder"
CATEGORY_SHOW_FINAL_WARNING = "show_final_warning"
CATEGORY_DINING_REMINDER = "dining_reminder"
CATEGORY_LIGHTNING_LANE_REMINDER = "lightning_lane_reminder"

# Date keys are local park calendar dates
DATE_KEY_FORMAT = "%Y-%m-%d"
