"""
Notification engine and the user-facing services around it.

Routes call the *_service modules; the scheduler jobs call engine.NotificationEngine and
archival.ArchivalSweep through ridealert.deps.
"""
